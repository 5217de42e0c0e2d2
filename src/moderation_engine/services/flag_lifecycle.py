"""Flag lifecycle state machine."""

import logging

from collections.abc import Awaitable
from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from moderation_engine.config.settings import ModerationSettings
from moderation_engine.config.settings import get_moderation_settings
from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.database.models.base import SYSTEM_ACTOR
from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import DecisionOutcome
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.base import FlagTransition
from moderation_engine.database.models.base import HumanActor
from moderation_engine.database.models.decision import ModerationDecision
from moderation_engine.database.models.decision import ModerationDecisionCreate
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.models.flag import ModerationFlagCreate
from moderation_engine.database.repositories.base import FlagStore
from moderation_engine.exceptions import ConflictError
from moderation_engine.exceptions import InvalidTransitionError
from moderation_engine.exceptions import NotFoundError
from moderation_engine.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTO_FLAG_REASON = "Auto-flagged by AI moderation system"

ENTRY_STATUSES = {
    FlagTransition.CREATE_REPORT: FlagStatus.PENDING,
    FlagTransition.CREATE_AUTO_FLAG: FlagStatus.AUTO_FLAGGED,
    FlagTransition.CREATE_AUTO_REJECT: FlagStatus.REJECTED,
}


def next_status(
    current: FlagStatus | None,
    transition: FlagTransition,
    outcome: DecisionOutcome | None = None,
) -> FlagStatus:
    """Return the status a transition leads to, or raise InvalidTransitionError.

    ``current`` is None for the create transitions. ``outcome`` is required by
    decide and appeal-resolve and must be absent otherwise.
    """
    match transition, current, outcome:
        case (
            FlagTransition.CREATE_REPORT
            | FlagTransition.CREATE_AUTO_FLAG
            | FlagTransition.CREATE_AUTO_REJECT,
            None,
            None,
        ):
            return ENTRY_STATUSES[transition]
        case (
            FlagTransition.DECIDE,
            FlagStatus.PENDING | FlagStatus.AUTO_FLAGGED,
            DecisionOutcome(),
        ):
            return outcome.flag_status
        case (
            FlagTransition.APPEAL_OPEN,
            FlagStatus.APPROVED | FlagStatus.REJECTED,
            None,
        ):
            return FlagStatus.APPEALED
        case (FlagTransition.APPEAL_RESOLVE, FlagStatus.APPEALED, DecisionOutcome()):
            return outcome.flag_status
    raise InvalidTransitionError(current, transition)


async def run_with_conflict_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    retries: int = 1,
    description: str = "operation",
) -> T:
    """Run ``operation``, re-running it up to ``retries`` times on ConflictError.

    ``operation`` must re-read whatever it writes so a retry sees fresh state.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except ConflictError as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                f"Conflict during {description}, retrying ({attempt}/{retries}): {e}"
            )


class FlagLifecycle:
    """Owns every write to a flag's status."""

    def __init__(
        self,
        store: FlagStore,
        notifications: NotificationService | None = None,
        settings: ModerationSettings | None = None,
    ):
        self.store = store
        self.notifications = notifications or NotificationService()
        self.settings = settings or get_moderation_settings()

    async def get_flag(self, flag_pk: UUID) -> ModerationFlag:
        """Get a flag or raise NotFoundError."""
        flag = await self.store.get_flag(flag_pk)
        if flag is None:
            raise NotFoundError(f"Flag {flag_pk} not found")
        return flag

    async def report(
        self, content: ContentReference, reporter_id: int, reason: str
    ) -> ModerationFlag:
        """Create a flag from a human report, awaiting review."""
        flag = await self.store.create_flag(
            ModerationFlagCreate(
                content=content,
                reported_by=HumanActor(user_id=reporter_id),
                reason=reason,
                status=next_status(None, FlagTransition.CREATE_REPORT),
            )
        )
        logger.info(
            f"Flag {flag.pk} reported by user {reporter_id} on "
            f"{content.content_type.value} {content.content_id}"
        )
        return flag

    async def auto_flag(
        self, content: ContentReference, analysis: ContentAnalysis
    ) -> ModerationFlag:
        """Create a system flag queued for human review."""
        flag = await self.store.create_flag(
            self._system_flag(content, analysis, FlagTransition.CREATE_AUTO_FLAG)
        )
        logger.info(
            f"Flag {flag.pk} auto-flagged {content.content_type.value} "
            f"{content.content_id} with score {analysis.flag_score}"
        )
        return flag

    async def auto_reject(
        self, content: ContentReference, analysis: ContentAnalysis
    ) -> tuple[ModerationFlag, ModerationDecision]:
        """Create an already-rejected flag together with its system decision."""
        flag_data = self._system_flag(
            content, analysis, FlagTransition.CREATE_AUTO_REJECT
        )
        reasoning = analysis.reasoning or "No reasoning provided"

        async with self.store.transaction() as tx:
            flag = await tx.create_flag(flag_data)
            decision = await tx.create_decision(
                ModerationDecisionCreate(
                    flag_pk=flag.pk,
                    moderator=SYSTEM_ACTOR,
                    decision=DecisionOutcome.REJECTED,
                    reasoning=f"Auto-rejected by AI. Reason: {reasoning}",
                    ai_assisted=True,
                )
            )

        logger.info(
            f"Flag {flag.pk} auto-rejected {content.content_type.value} "
            f"{content.content_id} with score {analysis.flag_score}"
        )
        await self.notifications.flag_transitioned(flag)
        return flag, decision

    async def decide(
        self,
        flag_pk: UUID,
        moderator_id: int,
        outcome: DecisionOutcome,
        reasoning: str,
        ai_assisted: bool = False,
    ) -> tuple[ModerationFlag, ModerationDecision]:
        """Record a human decision on a flag awaiting review."""
        decision_data = ModerationDecisionCreate(
            flag_pk=flag_pk,
            moderator=HumanActor(user_id=moderator_id),
            decision=outcome,
            reasoning=reasoning,
            ai_assisted=ai_assisted,
        )

        async def attempt() -> tuple[ModerationFlag, ModerationDecision]:
            flag = await self.get_flag(flag_pk)
            async with self.store.transaction() as tx:
                updated = await self.apply(flag, FlagTransition.DECIDE, outcome, tx)
                decision = await tx.create_decision(decision_data)
            return updated, decision

        flag, decision = await run_with_conflict_retry(
            attempt,
            retries=self.settings.max_conflict_retries,
            description=f"decision on flag {flag_pk}",
        )
        logger.info(f"Flag {flag_pk} {outcome.value} by moderator {moderator_id}")
        await self.notifications.flag_transitioned(flag)
        return flag, decision

    async def apply(
        self,
        flag: ModerationFlag,
        transition: FlagTransition,
        outcome: DecisionOutcome | None = None,
        store: FlagStore | None = None,
    ) -> ModerationFlag:
        """Write the status ``transition`` leads to from the flag as read.

        Pass the transaction's store to make the write part of a larger unit of
        work; the caller then announces the result once it commits.
        """
        status = next_status(flag.status, transition, outcome)
        return await (store or self.store).update_flag_status(
            flag.pk, status, flag.version
        )

    async def announce(self, flag: ModerationFlag) -> None:
        """Notify downstream consumers of a committed transition."""
        await self.notifications.flag_transitioned(flag)

    def _system_flag(
        self,
        content: ContentReference,
        analysis: ContentAnalysis,
        transition: FlagTransition,
    ) -> ModerationFlagCreate:
        return ModerationFlagCreate(
            content=content,
            reported_by=SYSTEM_ACTOR,
            reason=AUTO_FLAG_REASON,
            ai_score=analysis.flag_score,
            ai_reasoning=analysis.reasoning or None,
            status=next_status(None, transition),
        )
