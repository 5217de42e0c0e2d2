"""In-process FlagStore used by tests, local tooling and single-node setups."""

import asyncio

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC
from datetime import datetime
from uuid import UUID
from uuid import uuid4

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


class _StoreState:
    """Committed records, keyed by primary key in insertion order."""

    def __init__(
        self,
        flags: dict[UUID, ModerationFlag] | None = None,
        decisions: dict[UUID, ModerationDecision] | None = None,
        appeals: dict[UUID, ModerationAppeal] | None = None,
    ):
        self.flags = flags if flags is not None else {}
        self.decisions = decisions if decisions is not None else {}
        self.appeals = appeals if appeals is not None else {}

    def copy(self) -> "_StoreState":
        # Records are frozen, so copying the mappings is enough to stage writes.
        return _StoreState(dict(self.flags), dict(self.decisions), dict(self.appeals))


class InMemoryFlagStore(FlagStore):
    """FlagStore backed by dictionaries.

    Writers are serialised by a lock. A transaction works on a staged copy of
    the state and swaps it in on commit, so concurrent readers see either all
    of a transaction's writes or none of them.
    """

    def __init__(self, state: _StoreState | None = None):
        self._state = state or _StoreState()
        self._write_lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[FlagStore]:
        async with self._write_lock:
            staged = type(self)(self._state.copy())
            yield staged
            self._state = staged._state

    async def create_flag(self, flag_data: ModerationFlagCreate) -> ModerationFlag:
        now = datetime.now(UTC)
        flag = ModerationFlag(
            pk=uuid4(),
            created_at=now,
            updated_at=now,
            version=1,
            **flag_data.model_dump(),
        )
        async with self._write_lock:
            self._state.flags[flag.pk] = flag
        return flag

    async def get_flag(self, pk: UUID) -> ModerationFlag | None:
        return self._state.flags.get(pk)

    async def list_flags_by_status(
        self, status: FlagStatus, limit: int = 100, offset: int = 0
    ) -> list[ModerationFlag]:
        flags = sorted(
            (flag for flag in self._state.flags.values() if flag.status == status),
            key=lambda flag: flag.created_at,
        )
        return flags[offset : offset + limit]

    async def update_flag_status(
        self, pk: UUID, status: FlagStatus, expected_version: int
    ) -> ModerationFlag:
        async with self._write_lock:
            flag = self._state.flags.get(pk)
            if flag is None:
                raise NotFoundError(f"Flag {pk} not found")
            if flag.version != expected_version:
                raise ConflictError("ModerationFlag", pk, expected_version)

            updated = flag.model_copy(
                update={
                    "status": status,
                    "version": flag.version + 1,
                    "updated_at": datetime.now(UTC),
                }
            )
            self._state.flags[pk] = updated
            return updated

    async def create_decision(
        self, decision_data: ModerationDecisionCreate
    ) -> ModerationDecision:
        async with self._write_lock:
            if decision_data.flag_pk not in self._state.flags:
                raise NotFoundError(f"Flag {decision_data.flag_pk} not found")
            decision = ModerationDecision(
                pk=uuid4(),
                created_at=datetime.now(UTC),
                **decision_data.model_dump(),
            )
            self._state.decisions[decision.pk] = decision
            return decision

    async def list_decisions(self, flag_pk: UUID) -> list[ModerationDecision]:
        return [
            decision
            for decision in self._state.decisions.values()
            if decision.flag_pk == flag_pk
        ]

    async def create_appeal(self, appeal_data: AppealCreate) -> ModerationAppeal:
        async with self._write_lock:
            if appeal_data.flag_pk not in self._state.flags:
                raise NotFoundError(f"Flag {appeal_data.flag_pk} not found")
            if self._find_pending_appeal(appeal_data.flag_pk) is not None:
                raise AppealNotAllowedError(
                    f"Flag {appeal_data.flag_pk} already has a pending appeal"
                )
            appeal = ModerationAppeal(
                pk=uuid4(),
                created_at=datetime.now(UTC),
                status=AppealStatus.PENDING,
                version=1,
                **appeal_data.model_dump(),
            )
            self._state.appeals[appeal.pk] = appeal
            return appeal

    async def get_appeal(self, pk: UUID) -> ModerationAppeal | None:
        return self._state.appeals.get(pk)

    async def get_pending_appeal(self, flag_pk: UUID) -> ModerationAppeal | None:
        return self._find_pending_appeal(flag_pk)

    async def list_appeals(self, flag_pk: UUID) -> list[ModerationAppeal]:
        return [
            appeal
            for appeal in self._state.appeals.values()
            if appeal.flag_pk == flag_pk
        ]

    async def update_appeal(
        self, pk: UUID, appeal_update: AppealUpdate, expected_version: int
    ) -> ModerationAppeal:
        async with self._write_lock:
            appeal = self._state.appeals.get(pk)
            if appeal is None:
                raise NotFoundError(f"Appeal {pk} not found")
            if appeal.version != expected_version:
                raise ConflictError("ModerationAppeal", pk, expected_version)
            if not appeal.is_pending:
                raise AppealAlreadyResolvedError(f"Appeal {pk} is already resolved")

            updated = appeal.model_copy(
                update={**appeal_update.model_dump(), "version": appeal.version + 1}
            )
            self._state.appeals[pk] = updated
            return updated

    def _find_pending_appeal(self, flag_pk: UUID) -> ModerationAppeal | None:
        for appeal in self._state.appeals.values():
            if appeal.flag_pk == flag_pk and appeal.is_pending:
                return appeal
        return None
