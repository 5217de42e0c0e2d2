"""Reputation side effects of moderation outcomes."""

import logging

from abc import ABC
from abc import abstractmethod
from uuid import uuid4

from moderation_engine.config.settings import ModerationSettings
from moderation_engine.config.settings import get_moderation_settings
from moderation_engine.database.connection import Database
from moderation_engine.database.models.flag import ModerationFlag

logger = logging.getLogger(__name__)


class ReputationLedger(ABC):
    """Records point adjustments against a user's reputation."""

    @abstractmethod
    async def adjust_points(self, user_id: int, points: int, reason: str) -> None:
        """Add ``points`` (negative to revoke) to a user's reputation."""


class PostgresReputationLedger(ReputationLedger):
    """Appends adjustments to the ``reputation_adjustments`` table."""

    def __init__(self, database: Database):
        self.database = database

    async def adjust_points(self, user_id: int, points: int, reason: str) -> None:
        query = """
            INSERT INTO reputation_adjustments (pk, user_id, points, reason)
            VALUES ($1, $2, $3, $4)
        """
        async with self.database.get_connection() as conn:
            await conn.execute(query, uuid4(), user_id, points, reason)


class ReputationService:
    """Applies the rejection penalty and restores it when an appeal succeeds.

    Failures are logged and swallowed; moderation outcomes never depend on
    the ledger.
    """

    def __init__(
        self,
        ledger: ReputationLedger | None = None,
        settings: ModerationSettings | None = None,
    ):
        self.ledger = ledger
        self.penalty_points = (settings or get_moderation_settings()).reputation_penalty_points

    async def content_rejected(self, author_id: int | None, flag: ModerationFlag) -> None:
        await self._adjust(
            author_id,
            -self.penalty_points,
            f"Content rejected: {flag.content.content_type.value} "
            f"{flag.content.content_id} (flag {flag.pk})",
        )

    async def rejection_overturned(
        self, author_id: int | None, flag: ModerationFlag
    ) -> None:
        await self._adjust(
            author_id,
            self.penalty_points,
            f"Rejection overturned on appeal: {flag.content.content_type.value} "
            f"{flag.content.content_id} (flag {flag.pk})",
        )

    async def _adjust(self, author_id: int | None, points: int, reason: str) -> None:
        if self.ledger is None or author_id is None or points == 0:
            return

        try:
            await self.ledger.adjust_points(author_id, points, reason)
            logger.info(f"Adjusted reputation of user {author_id} by {points}")
        except Exception as e:
            # Don't fail moderation if the reputation ledger fails
            logger.exception(f"Failed to adjust reputation for user {author_id}: {e}")
