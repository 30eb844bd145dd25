"""
Queries and commands accepted by the datasource store.
The store writes its outcome into the `result` field of each object.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .enums import DataSourceAccess


def _access_value(v):
    if isinstance(v, DataSourceAccess):
        return v.value
    return v or DataSourceAccess.PROXY.value


class GetDataSourceQuery(BaseModel):
    org_id: int = 0
    id: int = 0
    uid: str = ""
    name: str = ""

    result: Optional[Any] = None


class GetDataSourcesQuery(BaseModel):
    org_id: int
    data_source_limit: int = 0

    result: List[Any] = Field(default_factory=list)


class GetDataSourcesByTypeQuery(BaseModel):
    type: str = ""

    result: List[Any] = Field(default_factory=list)


class GetDefaultDataSourceQuery(BaseModel):
    org_id: int

    result: Optional[Any] = None


class AddDataSourceCommand(BaseModel):
    org_id: int
    name: str
    type: str
    access: str = DataSourceAccess.PROXY.value
    url: str = ""
    user: str = ""
    password: str = ""
    database: str = ""
    basic_auth: bool = False
    basic_auth_user: str = ""
    basic_auth_password: str = ""
    with_credentials: bool = False
    is_default: bool = False
    json_data: Optional[Dict[str, Any]] = None
    encrypted_secure_json_data: Dict[str, str] = Field(default_factory=dict)
    uid: str = ""
    read_only: bool = False

    result: Optional[Any] = None

    @field_validator('access', mode='before')
    @classmethod
    def validate_access(cls, v):
        return _access_value(v)


class UpdateDataSourceCommand(BaseModel):
    id: int
    org_id: int
    name: str
    type: str
    access: str = DataSourceAccess.PROXY.value
    url: str = ""
    user: str = ""
    password: str = ""
    database: str = ""
    basic_auth: bool = False
    basic_auth_user: str = ""
    basic_auth_password: str = ""
    with_credentials: bool = False
    is_default: bool = False
    json_data: Optional[Dict[str, Any]] = None
    encrypted_secure_json_data: Dict[str, str] = Field(default_factory=dict)
    read_only: bool = False
    # Version the caller last read; 0 disables the optimistic check
    version: int = 0

    result: Optional[Any] = None

    @field_validator('access', mode='before')
    @classmethod
    def validate_access(cls, v):
        return _access_value(v)


class DeleteDataSourceCommand(BaseModel):
    org_id: int = 0
    id: int = 0
    uid: str = ""
    name: str = ""

    deleted_data_sources_count: int = 0
