"""
Data Source Store - Persist, mutate and query data source configurations.

Reads run in a short-lived session. Writes run inside one transaction from
TransactionManager; domain events registered during a write are published
only after it commits.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import SessionLocal, is_unique_constraint_violation
from ..exceptions import (
    DataSourceIdentifierNotSet, DataSourceNotFound, DataSourceNameExists,
    DataSourceUidExists, DataSourceUpdatingOldVersion,
    DataSourceFailedGenerateUniqueUid, InvalidArgument
)
from ..models.data_source import DataSource
from ..models.events import DataSourceCreated, DataSourceDeleted
from ..models.commands import (
    GetDataSourceQuery, GetDataSourcesQuery, GetDataSourcesByTypeQuery,
    GetDefaultDataSourceQuery, AddDataSourceCommand, UpdateDataSourceCommand,
    DeleteDataSourceCommand
)
from .event_bus import EventBus
from .metrics_service import MetricsService, DB_DATASOURCE_QUERY_BY_ID
from .transaction_service import TransactionManager
from .uid_service import UidGenerator

logger = logging.getLogger(__name__)

# Written on every update, so an empty value clears the stored one
ALWAYS_UPDATED_COLUMNS = (
    "user", "password", "basic_auth_password",
    "basic_auth", "with_credentials", "is_default", "read_only",
)

# Left untouched when the command carries an empty value
OMIT_IF_EMPTY_COLUMNS = (
    "name", "type", "access", "url", "database", "basic_auth_user",
)


def update_is_default_flag(session: Session, data_source: DataSource) -> int:
    """
    Clear is_default on every other data source of the same org.

    Must run in the transaction of the write that set the flag.

    Returns:
        Number of sibling rows touched (0 when the row is not the default)
    """
    if not data_source.is_default:
        return 0

    result = session.execute(
        update(DataSource)
        .where(
            DataSource.org_id == data_source.org_id,
            DataSource.id != data_source.id
        )
        .values(is_default=False)
    )
    return result.rowcount


class DataSourceStore:
    """Store facade for data source queries and commands"""

    def __init__(
        self,
        session_factory=None,
        event_bus: Optional[EventBus] = None,
        log: Optional[logging.Logger] = None,
        uid_generator: Optional[UidGenerator] = None,
        metrics: Optional[MetricsService] = None
    ):
        self.log = log or logger
        self.transactions = TransactionManager(session_factory or SessionLocal, event_bus, self.log)
        self.uid_generator = uid_generator or UidGenerator()
        self.metrics = metrics or MetricsService.instance()

    # Queries

    def get_data_source(self, query: GetDataSourceQuery) -> DataSource:
        """
        Get one data source by org_id plus uid, id and/or name.

        Every identifier supplied must match the same row.

        Raises:
            DataSourceIdentifierNotSet: org_id or all identifiers missing
            DataSourceNotFound: no matching row
        """
        self.metrics.counter(DB_DATASOURCE_QUERY_BY_ID).increment()

        if query.org_id == 0 or (query.id == 0 and not query.name and not query.uid):
            raise DataSourceIdentifierNotSet()

        filters = [DataSource.org_id == query.org_id]
        if query.uid:
            filters.append(DataSource.uid == query.uid)
        if query.id:
            filters.append(DataSource.id == query.id)
        if query.name:
            filters.append(DataSource.name == query.name)

        with self.transactions.session_scope() as session:
            try:
                data_source = session.execute(
                    select(DataSource).where(*filters).limit(1)
                ).scalars().first()
            except SQLAlchemyError as e:
                self.log.error(
                    f"Failed getting data source: {str(e)} "
                    f"(uid={query.uid!r}, id={query.id}, name={query.name!r}, org_id={query.org_id})"
                )
                raise

        if data_source is None:
            raise DataSourceNotFound()

        query.result = data_source
        return data_source

    def get_data_sources(self, query: GetDataSourcesQuery) -> List[DataSource]:
        """Data sources of an org ordered by name; a limit <= 0 means no limit"""
        statement = (
            select(DataSource)
            .where(DataSource.org_id == query.org_id)
            .order_by(DataSource.name.asc())
        )
        if query.data_source_limit > 0:
            statement = statement.limit(query.data_source_limit)

        with self.transactions.session_scope() as session:
            query.result = list(session.execute(statement).scalars().all())

        return query.result

    def get_data_sources_by_type(self, query: GetDataSourcesByTypeQuery) -> List[DataSource]:
        """Data sources of one type across all orgs, ordered by id"""
        if not query.type:
            raise InvalidArgument("datasource type cannot be empty")

        statement = (
            select(DataSource)
            .where(DataSource.type == query.type)
            .order_by(DataSource.id.asc())
        )

        with self.transactions.session_scope() as session:
            query.result = list(session.execute(statement).scalars().all())

        return query.result

    def get_default_data_source(self, query: GetDefaultDataSourceQuery) -> DataSource:
        """The data source flagged as default for the org"""
        with self.transactions.session_scope() as session:
            data_source = session.execute(
                select(DataSource).where(
                    DataSource.org_id == query.org_id,
                    DataSource.is_default == True  # noqa: E712
                ).limit(1)
            ).scalars().first()

        if data_source is None:
            raise DataSourceNotFound()

        query.result = data_source
        return data_source

    # Commands

    def add_data_source(self, cmd: AddDataSourceCommand) -> DataSource:
        """
        Insert a new data source.

        Raises:
            DataSourceNameExists: (org_id, name) already used
            DataSourceFailedGenerateUniqueUid: no free uid found
            DataSourceUidExists: (org_id, uid) already used
        """
        with self.transactions.in_transaction() as tx:
            session = tx.session

            existing = session.execute(
                select(DataSource.id).where(
                    DataSource.org_id == cmd.org_id,
                    DataSource.name == cmd.name
                ).limit(1)
            ).first()
            if existing is not None:
                raise DataSourceNameExists()

            if cmd.json_data is None:
                cmd.json_data = {}

            if not cmd.uid:
                outcome = self.uid_generator.generate(session, cmd.org_id)
                if outcome.exhausted:
                    raise DataSourceFailedGenerateUniqueUid(
                        f"Failed to generate UID for datasource {cmd.name!r}: "
                        f"{DataSourceFailedGenerateUniqueUid.message}"
                    )
                cmd.uid = outcome.uid

            now = datetime.utcnow()
            data_source = DataSource(
                org_id=cmd.org_id,
                uid=cmd.uid,
                name=cmd.name,
                type=cmd.type,
                access=cmd.access,
                url=cmd.url,
                user=cmd.user,
                password=cmd.password,
                database=cmd.database,
                is_default=cmd.is_default,
                basic_auth=cmd.basic_auth,
                basic_auth_user=cmd.basic_auth_user,
                basic_auth_password=cmd.basic_auth_password,
                with_credentials=cmd.with_credentials,
                json_data=cmd.json_data,
                secure_json_data=cmd.encrypted_secure_json_data,
                read_only=cmd.read_only,
                version=1,
                created=now,
                updated=now,
            )
            session.add(data_source)

            try:
                session.flush()
            except IntegrityError as e:
                if is_unique_constraint_violation(e, "uid"):
                    self.log.error(f"Data source uid {cmd.uid!r} already exists in org {cmd.org_id}")
                    raise DataSourceUidExists() from e
                raise

            update_is_default_flag(session, data_source)

            tx.publish_after_commit(DataSourceCreated(
                org_id=cmd.org_id,
                id=data_source.id,
                uid=cmd.uid,
                name=cmd.name,
            ))

        self.log.info(f"Data source {data_source.id} ({data_source.uid}) added to org {cmd.org_id}")
        cmd.result = data_source
        return data_source

    def update_data_source(self, cmd: UpdateDataSourceCommand) -> DataSource:
        """
        Replace a data source's configuration.

        With cmd.version != 0 the write is accepted only while the stored
        version is at or below cmd.version, so a caller may pass a version
        ahead of the stored one to force the update. cmd.version == 0 skips
        the check. The stored version becomes cmd.version + 1.

        Raises:
            DataSourceUpdatingOldVersion: no row matched (missing or stale)
        """
        with self.transactions.in_transaction() as tx:
            session = tx.session

            if cmd.json_data is None:
                cmd.json_data = {}

            result = session.execute(
                update(DataSource)
                .where(*self._version_predicate(cmd))
                .values(**self._update_values(cmd))
            )

            if result.rowcount == 0:
                self.log.info(
                    f"Update of data source {cmd.id} in org {cmd.org_id} matched no row (version {cmd.version})"
                )
                raise DataSourceUpdatingOldVersion()

            data_source = session.get(DataSource, cmd.id, populate_existing=True)
            update_is_default_flag(session, data_source)

        self.log.info(f"Data source {cmd.id} in org {cmd.org_id} updated to version {data_source.version}")
        cmd.result = data_source
        return data_source

    def delete_data_source(self, cmd: DeleteDataSourceCommand) -> int:
        """
        Delete by org_id plus one identifier, chosen as uid, then id, then name.

        Deleting a missing data source is not an error.

        Returns:
            Number of deleted rows (0 or 1)
        """
        if cmd.org_id == 0:
            raise DataSourceIdentifierNotSet()

        if cmd.uid:
            identifier = DataSource.uid == cmd.uid
        elif cmd.id:
            identifier = DataSource.id == cmd.id
        elif cmd.name:
            identifier = DataSource.name == cmd.name
        else:
            raise DataSourceIdentifierNotSet()

        with self.transactions.in_transaction() as tx:
            result = tx.session.execute(
                delete(DataSource).where(DataSource.org_id == cmd.org_id, identifier)
            )
            cmd.deleted_data_sources_count = result.rowcount

            tx.publish_after_commit(DataSourceDeleted(
                org_id=cmd.org_id,
                id=cmd.id,
                uid=cmd.uid,
                name=cmd.name,
            ))

        self.log.info(f"Deleted {cmd.deleted_data_sources_count} data source(s) from org {cmd.org_id}")
        return cmd.deleted_data_sources_count

    # Helpers

    @staticmethod
    def _version_predicate(cmd: UpdateDataSourceCommand) -> list:
        """Match the row, and with a version given, only while stored version <= cmd.version"""
        predicate = [DataSource.id == cmd.id, DataSource.org_id == cmd.org_id]
        if cmd.version != 0:
            predicate.append(DataSource.version < cmd.version + 1)
        return predicate

    @staticmethod
    def _update_values(cmd: UpdateDataSourceCommand) -> Dict[str, Any]:
        values = {column: getattr(cmd, column) for column in ALWAYS_UPDATED_COLUMNS}

        for column in OMIT_IF_EMPTY_COLUMNS:
            value = getattr(cmd, column)
            if value:
                values[column] = value

        values["json_data"] = cmd.json_data
        if cmd.encrypted_secure_json_data:
            values["secure_json_data"] = cmd.encrypted_secure_json_data

        values["version"] = cmd.version + 1
        values["updated"] = datetime.utcnow()
        return values
