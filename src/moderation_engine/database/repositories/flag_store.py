"""PostgreSQL FlagStore built on asyncpg."""

import logging

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from uuid import UUID
from uuid import uuid4

import asyncpg

from asyncpg import Connection
from asyncpg import Record

from moderation_engine.database.connection import Database
from moderation_engine.database.models.appeal import AppealCreate
from moderation_engine.database.models.appeal import AppealUpdate
from moderation_engine.database.models.appeal import ModerationAppeal
from moderation_engine.database.models.base import AppealStatus
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.decision import ModerationDecision
from moderation_engine.database.models.decision import ModerationDecisionCreate
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.models.flag import ModerationFlagCreate
from moderation_engine.database.repositories.base import FlagStore
from moderation_engine.exceptions import AppealAlreadyResolvedError
from moderation_engine.exceptions import AppealNotAllowedError
from moderation_engine.exceptions import ConflictError
from moderation_engine.exceptions import NotFoundError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent.parent / "schema.sql"


def _actor_from_columns(kind: str, user_id: int | None) -> dict[str, Any]:
    if kind == "system":
        return {"kind": "system"}
    return {"kind": "human", "user_id": user_id}


class PostgresFlagStore(FlagStore):
    """FlagStore over the ``moderation_*`` tables.

    Versioned updates compare-and-swap on the ``version`` column, and the
    partial unique index on pending appeals backs the one-pending-appeal rule.
    """

    def __init__(self, database: Database, connection: Connection | None = None):
        self.database = database
        self._connection = connection

    @asynccontextmanager
    async def _acquire(self) -> AsyncGenerator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        async with self.database.get_connection() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[FlagStore]:
        if self._connection is not None:
            async with self._connection.transaction():
                yield self
            return
        async with self.database.get_transaction() as connection:
            yield PostgresFlagStore(self.database, connection)

    async def ensure_schema(self) -> None:
        """Create the moderation tables if they do not exist."""
        async with self._acquire() as conn:
            await conn.execute(SCHEMA_PATH.read_text())
        logger.info("Moderation schema ensured")

    def _record_to_flag(self, record: Record) -> ModerationFlag:
        data = dict(record)
        return ModerationFlag.model_validate({
            "pk": data["pk"],
            "content": {
                "content_id": data["content_id"],
                "content_type": data["content_type"],
            },
            "reported_by": _actor_from_columns(
                data["reported_by_kind"], data["reported_by_id"]
            ),
            "reason": data["reason"],
            "ai_score": data["ai_score"],
            "ai_reasoning": data["ai_reasoning"],
            "status": data["status"],
            "version": data["version"],
            "created_at": data["created_at"],
            "updated_at": data["updated_at"],
        })

    def _record_to_decision(self, record: Record) -> ModerationDecision:
        data = dict(record)
        data["moderator"] = _actor_from_columns(
            data.pop("moderator_kind"), data.pop("moderator_id")
        )
        return ModerationDecision.model_validate(data)

    def _record_to_appeal(self, record: Record) -> ModerationAppeal:
        return ModerationAppeal.model_validate(dict(record))

    async def create_flag(self, flag_data: ModerationFlagCreate) -> ModerationFlag:
        query = """
            INSERT INTO moderation_flags (
                pk, content_id, content_type, reported_by_kind, reported_by_id,
                reason, ai_score, ai_reasoning, status
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING *
        """

        async with self._acquire() as conn:
            record = await conn.fetchrow(
                query,
                uuid4(),
                flag_data.content.content_id,
                flag_data.content.content_type.value,
                flag_data.reported_by.kind,
                flag_data.reported_by.user_id,
                flag_data.reason,
                flag_data.ai_score,
                flag_data.ai_reasoning,
                flag_data.status.value,
            )
            if record is None:
                raise ValueError("Failed to create record in moderation_flags")
            return self._record_to_flag(record)

    async def get_flag(self, pk: UUID) -> ModerationFlag | None:
        query = "SELECT * FROM moderation_flags WHERE pk = $1"

        async with self._acquire() as conn:
            record = await conn.fetchrow(query, pk)
            return self._record_to_flag(record) if record else None

    async def list_flags_by_status(
        self, status: FlagStatus, limit: int = 100, offset: int = 0
    ) -> list[ModerationFlag]:
        query = """
            SELECT * FROM moderation_flags
            WHERE status = $1
            ORDER BY created_at ASC
            LIMIT $2 OFFSET $3
        """

        async with self._acquire() as conn:
            records = await conn.fetch(query, status.value, limit, offset)
            return [self._record_to_flag(record) for record in records]

    async def update_flag_status(
        self, pk: UUID, status: FlagStatus, expected_version: int
    ) -> ModerationFlag:
        query = """
            UPDATE moderation_flags
            SET status = $2, version = version + 1, updated_at = NOW()
            WHERE pk = $1 AND version = $3
            RETURNING *
        """

        async with self._acquire() as conn:
            record = await conn.fetchrow(query, pk, status.value, expected_version)
            if record is not None:
                return self._record_to_flag(record)

            exists = await conn.fetchval(
                "SELECT EXISTS(SELECT 1 FROM moderation_flags WHERE pk = $1)", pk
            )
            if not exists:
                raise NotFoundError(f"Flag {pk} not found")
            raise ConflictError("ModerationFlag", pk, expected_version)

    async def create_decision(
        self, decision_data: ModerationDecisionCreate
    ) -> ModerationDecision:
        query = """
            INSERT INTO moderation_decisions (
                pk, flag_pk, moderator_kind, moderator_id,
                decision, reasoning, ai_assisted
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING *
        """

        async with self._acquire() as conn:
            try:
                record = await conn.fetchrow(
                    query,
                    uuid4(),
                    decision_data.flag_pk,
                    decision_data.moderator.kind,
                    decision_data.moderator.user_id,
                    decision_data.decision.value,
                    decision_data.reasoning,
                    decision_data.ai_assisted,
                )
            except asyncpg.ForeignKeyViolationError as e:
                raise NotFoundError(f"Flag {decision_data.flag_pk} not found") from e
            if record is None:
                raise ValueError("Failed to create record in moderation_decisions")
            return self._record_to_decision(record)

    async def list_decisions(self, flag_pk: UUID) -> list[ModerationDecision]:
        query = """
            SELECT * FROM moderation_decisions
            WHERE flag_pk = $1
            ORDER BY created_at ASC
        """

        async with self._acquire() as conn:
            records = await conn.fetch(query, flag_pk)
            return [self._record_to_decision(record) for record in records]

    async def create_appeal(self, appeal_data: AppealCreate) -> ModerationAppeal:
        query = """
            INSERT INTO moderation_appeals (pk, flag_pk, user_id, reasoning, status)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *
        """

        async with self._acquire() as conn:
            try:
                record = await conn.fetchrow(
                    query,
                    uuid4(),
                    appeal_data.flag_pk,
                    appeal_data.user_id,
                    appeal_data.reasoning,
                    AppealStatus.PENDING.value,
                )
            except asyncpg.UniqueViolationError as e:
                raise AppealNotAllowedError(
                    f"Flag {appeal_data.flag_pk} already has a pending appeal"
                ) from e
            except asyncpg.ForeignKeyViolationError as e:
                raise NotFoundError(f"Flag {appeal_data.flag_pk} not found") from e
            if record is None:
                raise ValueError("Failed to create record in moderation_appeals")
            return self._record_to_appeal(record)

    async def get_appeal(self, pk: UUID) -> ModerationAppeal | None:
        query = "SELECT * FROM moderation_appeals WHERE pk = $1"

        async with self._acquire() as conn:
            record = await conn.fetchrow(query, pk)
            return self._record_to_appeal(record) if record else None

    async def get_pending_appeal(self, flag_pk: UUID) -> ModerationAppeal | None:
        query = """
            SELECT * FROM moderation_appeals
            WHERE flag_pk = $1 AND status = $2
        """

        async with self._acquire() as conn:
            record = await conn.fetchrow(query, flag_pk, AppealStatus.PENDING.value)
            return self._record_to_appeal(record) if record else None

    async def list_appeals(self, flag_pk: UUID) -> list[ModerationAppeal]:
        query = """
            SELECT * FROM moderation_appeals
            WHERE flag_pk = $1
            ORDER BY created_at ASC
        """

        async with self._acquire() as conn:
            records = await conn.fetch(query, flag_pk)
            return [self._record_to_appeal(record) for record in records]

    async def update_appeal(
        self, pk: UUID, appeal_update: AppealUpdate, expected_version: int
    ) -> ModerationAppeal:
        query = """
            UPDATE moderation_appeals
            SET status = $2, reviewed_by = $3, reviewed_at = $4,
                version = version + 1
            WHERE pk = $1 AND version = $5 AND status = $6
            RETURNING *
        """

        async with self._acquire() as conn:
            record = await conn.fetchrow(
                query,
                pk,
                appeal_update.status.value,
                appeal_update.reviewed_by,
                appeal_update.reviewed_at,
                expected_version,
                AppealStatus.PENDING.value,
            )
            if record is not None:
                return self._record_to_appeal(record)

            current = await conn.fetchrow(
                "SELECT status, version FROM moderation_appeals WHERE pk = $1", pk
            )
            if current is None:
                raise NotFoundError(f"Appeal {pk} not found")
            if current["version"] != expected_version:
                raise ConflictError("ModerationAppeal", pk, expected_version)
            raise AppealAlreadyResolvedError(f"Appeal {pk} is already resolved")
