"""
Transaction Service - Atomic scope for datasource mutations.

A transaction context carries the SQLAlchemy session and a list of events
registered during the transaction. Events are handed to the event bus only
after the session commits; on rollback they are dropped. Delivery is at most
once: a crash between commit and publish loses the events.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional

from sqlalchemy.orm import Session

from .event_bus import EventBus

logger = logging.getLogger(__name__)


class TransactionContext:
    """Session plus events waiting for a successful commit"""

    def __init__(self, session: Session):
        self.session = session
        self.pending_events: List[Any] = []

    def publish_after_commit(self, event: Any) -> None:
        self.pending_events.append(event)


class TransactionManager:
    """Opens sessions, commits or rolls back, then flushes pending events"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        event_bus: Optional[EventBus] = None,
        log: Optional[logging.Logger] = None
    ):
        self.session_factory = session_factory
        self.event_bus = event_bus
        self.log = log or logger

    def _new_session(self) -> Session:
        session = self.session_factory()
        # Results are read after the session closes
        session.expire_on_commit = False
        return session

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Short-lived session for reads"""
        session = self._new_session()
        try:
            yield session
        finally:
            session.close()

    @contextmanager
    def in_transaction(self) -> Iterator[TransactionContext]:
        """
        Run a block inside one transaction.

        Usage:
            with manager.in_transaction() as tx:
                tx.session.add(row)
                tx.publish_after_commit(event)
        """
        session = self._new_session()
        context = TransactionContext(session)
        try:
            yield context
            session.commit()
        except Exception:
            session.rollback()
            if context.pending_events:
                self.log.debug(f"Discarding {len(context.pending_events)} event(s) after rollback")
            context.pending_events.clear()
            raise
        finally:
            session.close()

        self._publish_pending(context)

    def _publish_pending(self, context: TransactionContext) -> None:
        """Publish events after commit; publish failures never undo the write"""
        events, context.pending_events = context.pending_events, []
        if not self.event_bus:
            return

        for event in events:
            try:
                self.event_bus.publish(event)
            except Exception as e:
                self.log.error(f"Failed to publish {type(event).__name__} after commit: {str(e)}")
