"""
Domain Events - Published after a datasource transaction commits.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class DataSourceEvent:
    """Base shape shared by datasource lifecycle events"""
    org_id: int
    id: int = 0
    uid: str = ""
    name: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def event_name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        data['event'] = self.event_name
        return data


@dataclass(frozen=True)
class DataSourceCreated(DataSourceEvent):
    pass


@dataclass(frozen=True)
class DataSourceDeleted(DataSourceEvent):
    pass
