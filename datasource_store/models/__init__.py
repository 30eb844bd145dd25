from .data_source import DataSource
from .enums import DataSourceAccess, DataSourceType
from .events import DataSourceEvent, DataSourceCreated, DataSourceDeleted
from .commands import (
    GetDataSourceQuery, GetDataSourcesQuery, GetDataSourcesByTypeQuery,
    GetDefaultDataSourceQuery, AddDataSourceCommand, UpdateDataSourceCommand,
    DeleteDataSourceCommand
)
