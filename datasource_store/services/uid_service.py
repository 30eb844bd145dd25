"""
Uid Service - Short random identifiers for data sources.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..models.data_source import DataSource

logger = logging.getLogger(__name__)

UID_ALPHABET = string.ascii_letters + string.digits


def generate_short_uid(length: int = None) -> str:
    """Random alphanumeric identifier"""
    length = length or settings.DATASOURCE_UID_LENGTH
    return ''.join(secrets.choice(UID_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class UidResult:
    """Outcome of uid generation: a uid, or exhausted after max attempts"""
    uid: Optional[str] = None
    attempts: int = 0

    @property
    def exhausted(self) -> bool:
        return self.uid is None


class UidGenerator:
    """Draws candidates and checks them against the caller's session"""

    def __init__(self, max_attempts: int = None, candidate_source: Callable[[], str] = None):
        self.max_attempts = max_attempts or settings.DATASOURCE_UID_MAX_ATTEMPTS
        self.candidate_source = candidate_source or generate_short_uid

    def generate(self, session: Session, org_id: int) -> UidResult:
        """
        Find a uid unused within the org.

        The existence check runs in the given session so it sees rows written
        earlier in the same transaction. A concurrent transaction can still
        take the same uid; the unique constraint catches that on insert.

        Args:
            session: Session of the active transaction
            org_id: Organization scope

        Returns:
            UidResult with the uid, or an exhausted result
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.candidate_source()

            exists = session.execute(
                select(DataSource.id).where(
                    DataSource.org_id == org_id,
                    DataSource.uid == candidate
                ).limit(1)
            ).first()

            if exists is None:
                return UidResult(uid=candidate, attempts=attempt)

            logger.debug(f"Generated uid collided in org {org_id} (attempt {attempt})")

        logger.warning(f"Could not generate unique datasource uid in org {org_id} after {self.max_attempts} attempts")
        return UidResult(uid=None, attempts=self.max_attempts)
