"""
Datasource store errors.
All of them are expected outcomes the caller has to handle.
"""


class DataSourceError(Exception):
    """Base exception for datasource store errors"""
    message = "Data source error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class DataSourceIdentifierNotSet(DataSourceError):
    """Raised when org_id or every identifying field is missing"""
    message = "Datasource identifier not set"


class DataSourceNotFound(DataSourceError):
    """Raised when a lookup matches no data source"""
    message = "Data source not found"


class DataSourceNameExists(DataSourceError):
    """Raised when the (org_id, name) pair is already taken"""
    message = "Data source with the same name already exists"


class DataSourceUidExists(DataSourceError):
    """Raised when the (org_id, uid) pair is already taken"""
    message = "Data source with the same uid already exists"


class DataSourceUpdatingOldVersion(DataSourceError):
    """Raised when an update matched no row (stale version or missing row)"""
    message = "Trying to update old version of datasource"


class DataSourceFailedGenerateUniqueUid(DataSourceError):
    """Raised when uid generation ran out of attempts"""
    message = "Failed to generate unique datasource ID"


class InvalidArgument(DataSourceError):
    """Raised for invalid query arguments"""
    message = "Invalid argument"
