"""
Datasource configuration store.
Persists organization-scoped data source configurations in a relational database.
"""

from .exceptions import (
    DataSourceError, DataSourceIdentifierNotSet, DataSourceNotFound,
    DataSourceNameExists, DataSourceUidExists, DataSourceUpdatingOldVersion,
    DataSourceFailedGenerateUniqueUid, InvalidArgument
)
from .services.data_source_store import DataSourceStore
from .services.event_bus import EventBus

__version__ = "1.0.0"
