"""
Tests for TransactionManager commit/rollback and post-commit publishing.
"""
import pytest
from unittest.mock import Mock
from sqlalchemy import func, select

from datasource_store.models.data_source import DataSource
from datasource_store.models.events import DataSourceCreated
from datasource_store.services.event_bus import EventBus
from datasource_store.services.transaction_service import TransactionManager, TransactionContext


def row_count(session_factory) -> int:
    session = session_factory()
    try:
        return session.execute(select(func.count(DataSource.id))).scalar()
    finally:
        session.close()


def new_row(name: str = "graphite") -> DataSource:
    return DataSource(org_id=1, uid=name, name=name, type="graphite")


@pytest.mark.unit
class TestTransactionContext:

    def test_collects_events(self):
        context = TransactionContext(session=Mock())
        event = DataSourceCreated(org_id=1)

        context.publish_after_commit(event)

        assert context.pending_events == [event]


@pytest.mark.unit
class TestTransactionManager:
    """Test transaction scope behaviour"""

    def test_commit_then_publish(self, session_factory):
        # Setup
        bus = EventBus()
        seen = []

        def handler(event):
            # The row is already committed when handlers run
            seen.append((event, row_count(session_factory)))

        bus.subscribe(handler)
        manager = TransactionManager(session_factory, bus)
        event = DataSourceCreated(org_id=1, uid="graphite")

        # Execute
        with manager.in_transaction() as tx:
            tx.session.add(new_row())
            tx.publish_after_commit(event)
            assert seen == []

        # Verify
        assert seen == [(event, 1)]

    def test_rollback_discards_events(self, session_factory):
        bus = Mock()
        manager = TransactionManager(session_factory, bus)

        with pytest.raises(ValueError):
            with manager.in_transaction() as tx:
                tx.session.add(new_row())
                tx.session.flush()
                tx.publish_after_commit(DataSourceCreated(org_id=1))
                raise ValueError("abort")

        assert row_count(session_factory) == 0
        bus.publish.assert_not_called()

    def test_publish_failure_does_not_undo_commit(self, session_factory):
        bus = Mock()
        bus.publish.side_effect = RuntimeError("bus down")
        log = Mock()
        manager = TransactionManager(session_factory, bus, log)

        with manager.in_transaction() as tx:
            tx.session.add(new_row())
            tx.publish_after_commit(DataSourceCreated(org_id=1))

        assert row_count(session_factory) == 1
        log.error.assert_called_once()

    def test_events_published_in_order(self, session_factory):
        bus = Mock()
        manager = TransactionManager(session_factory, bus)
        first, second = DataSourceCreated(org_id=1, uid="a"), DataSourceCreated(org_id=1, uid="b")

        with manager.in_transaction() as tx:
            tx.publish_after_commit(first)
            tx.publish_after_commit(second)

        assert [call.args[0] for call in bus.publish.call_args_list] == [first, second]

    def test_without_event_bus(self, session_factory):
        manager = TransactionManager(session_factory)

        with manager.in_transaction() as tx:
            tx.session.add(new_row())
            tx.publish_after_commit(DataSourceCreated(org_id=1))

        assert row_count(session_factory) == 1

    def test_session_scope_closes_session(self):
        session = Mock()
        manager = TransactionManager(lambda: session)

        with manager.session_scope() as scoped:
            assert scoped is session

        session.close.assert_called_once()
        assert session.expire_on_commit is False
