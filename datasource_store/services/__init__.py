from .data_source_store import DataSourceStore, update_is_default_flag
from .event_bus import EventBus
from .metrics_service import MetricsService
from .secure_json_service import SecureJsonService
from .transaction_service import TransactionManager, TransactionContext
from .uid_service import UidGenerator, UidResult, generate_short_uid
