"""Appeal filing and review."""

import logging

from datetime import UTC
from datetime import datetime
from uuid import UUID

from moderation_engine.database.models.appeal import AppealCreate
from moderation_engine.database.models.appeal import AppealUpdate
from moderation_engine.database.models.appeal import ModerationAppeal
from moderation_engine.database.models.base import AppealStatus
from moderation_engine.database.models.base import DecisionOutcome
from moderation_engine.database.models.base import FlagTransition
from moderation_engine.database.models.base import HumanActor
from moderation_engine.database.models.decision import ModerationDecisionCreate
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.repositories.base import FlagStore
from moderation_engine.exceptions import AppealAlreadyResolvedError
from moderation_engine.exceptions import AppealNotAllowedError
from moderation_engine.exceptions import NotFoundError
from moderation_engine.services.flag_lifecycle import FlagLifecycle
from moderation_engine.services.flag_lifecycle import run_with_conflict_retry

logger = logging.getLogger(__name__)


class AppealProcessor:
    """Reopens resolved flags on appeal and records the re-decision."""

    def __init__(self, store: FlagStore, lifecycle: FlagLifecycle):
        self.store = store
        self.lifecycle = lifecycle

    async def file_appeal(
        self, flag_pk: UUID, user_id: int, reasoning: str
    ) -> ModerationAppeal:
        """Open an appeal against an approved or rejected flag.

        The appeal and the flag's move to ``appealed`` are written together.
        """
        appeal_data = AppealCreate(flag_pk=flag_pk, user_id=user_id, reasoning=reasoning)

        async def attempt() -> tuple[ModerationFlag, ModerationAppeal]:
            flag = await self.lifecycle.get_flag(flag_pk)
            if not flag.status.is_resolved:
                raise AppealNotAllowedError(
                    f"Flag {flag_pk} is {flag.status.value} and cannot be appealed"
                )

            async with self.store.transaction() as tx:
                if await tx.get_pending_appeal(flag_pk) is not None:
                    raise AppealNotAllowedError(
                        f"Flag {flag_pk} already has a pending appeal"
                    )
                opened = await self.lifecycle.apply(
                    flag, FlagTransition.APPEAL_OPEN, store=tx
                )
                appeal = await tx.create_appeal(appeal_data)
            return opened, appeal

        flag, appeal = await run_with_conflict_retry(
            attempt,
            retries=self.lifecycle.settings.max_conflict_retries,
            description=f"appeal on flag {flag_pk}",
        )
        logger.info(f"Appeal {appeal.pk} filed by user {user_id} on flag {flag_pk}")
        await self.lifecycle.announce(flag)
        return appeal

    async def resolve_appeal(
        self,
        appeal_pk: UUID,
        reviewer_id: int,
        outcome: DecisionOutcome,
        reasoning: str | None = None,
    ) -> tuple[ModerationAppeal, ModerationFlag]:
        """Resolve a pending appeal and re-resolve its flag to ``outcome``.

        The appeal review, the flag transition and a decision recording the
        reviewer's verdict commit as one unit.
        """

        async def attempt() -> tuple[ModerationAppeal, ModerationFlag]:
            appeal = await self.store.get_appeal(appeal_pk)
            if appeal is None:
                raise NotFoundError(f"Appeal {appeal_pk} not found")
            if not appeal.is_pending:
                raise AppealAlreadyResolvedError(
                    f"Appeal {appeal_pk} is already {appeal.status.value}"
                )
            flag = await self.lifecycle.get_flag(appeal.flag_pk)

            async with self.store.transaction() as tx:
                resolved = await tx.update_appeal(
                    appeal.pk,
                    AppealUpdate(
                        status=AppealStatus(outcome.value),
                        reviewed_by=reviewer_id,
                        reviewed_at=datetime.now(UTC),
                    ),
                    appeal.version,
                )
                updated = await self.lifecycle.apply(
                    flag, FlagTransition.APPEAL_RESOLVE, outcome, tx
                )
                await tx.create_decision(
                    ModerationDecisionCreate(
                        flag_pk=flag.pk,
                        moderator=HumanActor(user_id=reviewer_id),
                        decision=outcome,
                        reasoning=reasoning or f"Appeal reviewed: {outcome.value}",
                    )
                )
            return resolved, updated

        appeal, flag = await run_with_conflict_retry(
            attempt,
            retries=self.lifecycle.settings.max_conflict_retries,
            description=f"review of appeal {appeal_pk}",
        )
        logger.info(
            f"Appeal {appeal_pk} {outcome.value} by reviewer {reviewer_id}, "
            f"flag {flag.pk} now {flag.status.value}"
        )
        await self.lifecycle.announce(flag)
        return appeal, flag

    async def list_appeals(self, flag_pk: UUID) -> list[ModerationAppeal]:
        """All appeals filed against a flag, oldest first."""
        return await self.store.list_appeals(flag_pk)
