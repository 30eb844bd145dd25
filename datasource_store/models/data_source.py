"""
DataSource Model - Connector configuration scoped to an organization.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, UniqueConstraint
from datetime import datetime
from typing import Dict, Any

from ..database import Base
from .enums import DataSourceAccess


class DataSource(Base):
    __tablename__ = "data_source"
    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_data_source_org_id_name"),
        UniqueConstraint("org_id", "uid", name="uq_data_source_org_id_uid"),
    )

    # Primary attributes
    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(40), nullable=False)
    org_id = Column(Integer, nullable=False, index=True)
    version = Column(Integer, nullable=False, default=1)

    name = Column(String(190), nullable=False)
    type = Column(String(255), nullable=False)
    access = Column(String(255), nullable=False, default=DataSourceAccess.PROXY.value)

    # Connection
    url = Column(String(255), nullable=False, default="")
    user = Column(String(255), nullable=False, default="")
    password = Column(String(255), nullable=True)  # legacy plaintext, superseded by secure_json_data
    database = Column(String(255), nullable=True)

    basic_auth = Column(Boolean, nullable=False, default=False)
    basic_auth_user = Column(String(255), nullable=True)
    basic_auth_password = Column(String(255), nullable=True)
    with_credentials = Column(Boolean, nullable=False, default=False)

    # Configuration
    json_data = Column(JSON)
    secure_json_data = Column(JSON)

    # State flags
    is_default = Column(Boolean, nullable=False, default=False)
    read_only = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<DataSource(id={self.id}, uid='{self.uid}', org_id={self.org_id}, name='{self.name}')>"

    def has_secure_value(self, key: str) -> bool:
        """Check whether an encrypted value is stored for the given key"""
        return bool(self.secure_json_data) and key in self.secure_json_data

    def decrypted_values(self, secure_json_service) -> Dict[str, str]:
        """
        Decrypt the secure_json_data sidecar.

        Args:
            secure_json_service: SecureJsonService holding the key

        Returns:
            Mapping of key to plaintext value
        """
        return secure_json_service.decrypt(self.secure_json_data or {})

    def to_dict(self, include_secure_fields: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for API responses. Secrets are reported as set/unset only."""
        data = {
            'id': self.id,
            'uid': self.uid,
            'org_id': self.org_id,
            'name': self.name,
            'type': self.type,
            'access': self.access,
            'url': self.url,
            'user': self.user,
            'database': self.database,
            'basic_auth': self.basic_auth,
            'basic_auth_user': self.basic_auth_user,
            'with_credentials': self.with_credentials,
            'is_default': self.is_default,
            'json_data': self.json_data or {},
            'secure_json_fields': {key: True for key in (self.secure_json_data or {})},
            'version': self.version,
            'read_only': self.read_only,
            'created': self.created.isoformat() if self.created else None,
            'updated': self.updated.isoformat() if self.updated else None,
        }

        if include_secure_fields:
            data['password'] = self.password
            data['basic_auth_password'] = self.basic_auth_password
            data['secure_json_data'] = self.secure_json_data or {}

        return data
