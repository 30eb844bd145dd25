"""
Model Enums - Access modes and well-known plugin types for data sources.
"""

from enum import Enum


class DataSourceAccess(str, Enum):
    """How the data source is reached"""
    PROXY = "proxy"
    DIRECT = "direct"


class DataSourceType(str, Enum):
    """Well-known data source plugin types. Any other type string is accepted."""
    GRAPHITE = "graphite"
    INFLUXDB = "influxdb"
    ELASTICSEARCH = "elasticsearch"
    PROMETHEUS = "prometheus"
    LOKI = "loki"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    MSSQL = "mssql"
    CLOUDWATCH = "cloudwatch"
    TESTDATA = "testdata"
