"""Moderation service: entry point for the host application."""

import asyncio
import logging

from enum import Enum
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict

from moderation_engine.config.settings import ModerationSettings
from moderation_engine.config.settings import get_moderation_settings
from moderation_engine.database.models.analysis import AssistRecommendation
from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.database.models.appeal import ModerationAppeal
from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import DecisionOutcome
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.decision import ModerationDecision
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.repositories.base import FlagStore
from moderation_engine.exceptions import AnalyzerUnavailableError
from moderation_engine.services.ai_assist_advisor import AIAssistAdvisor
from moderation_engine.services.appeal_processor import AppealProcessor
from moderation_engine.services.auto_moderation_policy import AutoModerationPolicy
from moderation_engine.services.auto_moderation_policy import ModerationAction
from moderation_engine.services.content_analyzer import ContentAnalyzer
from moderation_engine.services.content_source import ContentSource
from moderation_engine.services.flag_lifecycle import FlagLifecycle
from moderation_engine.services.notification_service import NotificationService
from moderation_engine.services.reanalysis_queue import ReanalysisQueue
from moderation_engine.services.reputation_service import ReputationService

logger = logging.getLogger(__name__)


class AutoModerationStatus(str, Enum):
    """Where newly created content ended up after automatic moderation."""

    AUTO_APPROVED = "auto_approved"
    AUTO_FLAGGED = "auto_flagged"
    REJECTED = "rejected"


class AutoModerationResult(BaseModel):
    """Outcome of running new content through analysis and policy."""

    flagged: bool
    status: AutoModerationStatus
    analysis: ContentAnalysis
    flag: ModerationFlag | None = None

    model_config = ConfigDict(frozen=True)


class ModerationService:
    """Wires analysis, policy, lifecycle, appeals and advice together.

    Reputation adjustments, notifications and re-analysis scheduling are side
    effects: their failures are logged and never change a moderation outcome.
    """

    def __init__(
        self,
        store: FlagStore,
        analyzer: ContentAnalyzer,
        content_source: ContentSource | None = None,
        notifications: NotificationService | None = None,
        reputation: ReputationService | None = None,
        reanalysis_queue: ReanalysisQueue | None = None,
        settings: ModerationSettings | None = None,
    ):
        self.settings = settings or get_moderation_settings()
        self.store = store
        self.analyzer = analyzer
        self.content_source = content_source
        self.reanalysis_queue = reanalysis_queue
        self.reputation = reputation or ReputationService(settings=self.settings)
        self.policy = AutoModerationPolicy(self.settings.auto_reject_threshold)
        self.lifecycle = FlagLifecycle(store, notifications, self.settings)
        self.appeals = AppealProcessor(store, self.lifecycle)
        self.advisor = (
            AIAssistAdvisor(
                store, analyzer, content_source, self.settings.analysis_timeout
            )
            if content_source is not None
            else None
        )

    async def auto_moderate(
        self, content: ContentReference, text: str, author_id: int | None = None
    ) -> AutoModerationResult:
        """Moderate newly created content, approving it if analysis fails."""
        try:
            return await self.moderate(content, text, author_id)
        except AnalyzerUnavailableError as e:
            logger.warning(
                f"Analysis unavailable for {content.content_type.value} "
                f"{content.content_id}, approving without review: {e}"
            )
            await self._schedule_reanalysis(content, text, author_id)
            return AutoModerationResult(
                flagged=False,
                status=AutoModerationStatus.AUTO_APPROVED,
                analysis=ContentAnalysis.not_flagged(),
            )

    async def moderate(
        self, content: ContentReference, text: str, author_id: int | None = None
    ) -> AutoModerationResult:
        """Analyse and classify content, raising if the analyzer fails."""
        analysis = await self._analyze(text)
        decision = self.policy.classify(analysis)

        if decision.action == ModerationAction.AUTO_REJECT:
            flag, _ = await self.lifecycle.auto_reject(content, analysis)
            await self.reputation.content_rejected(author_id, flag)
            return AutoModerationResult(
                flagged=True,
                status=AutoModerationStatus.REJECTED,
                analysis=analysis,
                flag=flag,
            )

        if decision.action == ModerationAction.AUTO_FLAG:
            flag = await self.lifecycle.auto_flag(content, analysis)
            return AutoModerationResult(
                flagged=True,
                status=AutoModerationStatus.AUTO_FLAGGED,
                analysis=analysis,
                flag=flag,
            )

        return AutoModerationResult(
            flagged=False,
            status=AutoModerationStatus.AUTO_APPROVED,
            analysis=analysis,
        )

    async def _analyze(self, text: str) -> ContentAnalysis:
        timeout = self.settings.analysis_timeout
        try:
            analysis = await asyncio.wait_for(
                self.analyzer.analyze(text), timeout=timeout
            )
        except AnalyzerUnavailableError:
            raise
        except TimeoutError as e:
            raise AnalyzerUnavailableError(
                f"Content analysis timed out after {timeout}s"
            ) from e
        except Exception as e:
            raise AnalyzerUnavailableError(f"Content analysis failed: {e}") from e

        if not isinstance(analysis, ContentAnalysis):
            raise AnalyzerUnavailableError(
                f"Content analyzer returned {type(analysis).__name__}"
            )
        return analysis

    async def report_content(
        self, content: ContentReference, reporter_id: int, reason: str
    ) -> ModerationFlag:
        return await self.lifecycle.report(content, reporter_id, reason)

    async def get_review_queue(self, limit: int = 100) -> list[ModerationFlag]:
        """Flags awaiting a human decision, oldest first."""
        flags = [
            *await self.store.list_flags_by_status(FlagStatus.PENDING, limit),
            *await self.store.list_flags_by_status(FlagStatus.AUTO_FLAGGED, limit),
        ]
        return sorted(flags, key=lambda flag: flag.created_at)[:limit]

    async def get_flags_by_status(
        self, status: FlagStatus, limit: int = 100, offset: int = 0
    ) -> list[ModerationFlag]:
        return await self.store.list_flags_by_status(status, limit, offset)

    async def get_flag(self, flag_pk: UUID) -> ModerationFlag:
        return await self.lifecycle.get_flag(flag_pk)

    async def get_decisions(self, flag_pk: UUID) -> list[ModerationDecision]:
        return await self.store.list_decisions(flag_pk)

    async def decide(
        self,
        flag_pk: UUID,
        moderator_id: int,
        outcome: DecisionOutcome,
        reasoning: str,
        ai_assisted: bool = False,
    ) -> ModerationDecision:
        """Record a moderator's decision on a flag in the review queue."""
        flag, decision = await self.lifecycle.decide(
            flag_pk, moderator_id, outcome, reasoning, ai_assisted
        )
        if outcome == DecisionOutcome.REJECTED:
            await self.reputation.content_rejected(await self._author_of(flag), flag)
        return decision

    async def file_appeal(
        self, flag_pk: UUID, user_id: int, reasoning: str
    ) -> ModerationAppeal:
        return await self.appeals.file_appeal(flag_pk, user_id, reasoning)

    async def resolve_appeal(
        self,
        appeal_pk: UUID,
        reviewer_id: int,
        outcome: DecisionOutcome,
        reasoning: str | None = None,
    ) -> ModerationAppeal:
        """Resolve an appeal and settle the author's reputation if it changed."""
        appeal, flag = await self.appeals.resolve_appeal(
            appeal_pk, reviewer_id, outcome, reasoning
        )

        decisions = await self.store.list_decisions(flag.pk)
        previous = decisions[-2].decision if len(decisions) >= 2 else None
        if previous is not None and previous != outcome:
            author_id = await self._author_of(flag)
            if outcome == DecisionOutcome.APPROVED:
                await self.reputation.rejection_overturned(author_id, flag)
            else:
                await self.reputation.content_rejected(author_id, flag)
        return appeal

    async def list_appeals(self, flag_pk: UUID) -> list[ModerationAppeal]:
        return await self.appeals.list_appeals(flag_pk)

    async def get_ai_assistance(self, flag_pk: UUID) -> AssistRecommendation:
        if self.advisor is None:
            raise RuntimeError("AI assistance requires a content source")
        return await self.advisor.recommend(flag_pk)

    async def _author_of(self, flag: ModerationFlag) -> int | None:
        if self.content_source is None:
            return None
        try:
            snapshot = await self.content_source.get_content(flag.content)
        except Exception as e:
            logger.exception(f"Failed to look up author for flag {flag.pk}: {e}")
            return None
        return snapshot.author_id if snapshot else None

    async def _schedule_reanalysis(
        self, content: ContentReference, text: str, author_id: int | None
    ) -> None:
        if self.reanalysis_queue is None:
            return
        try:
            await self.reanalysis_queue.enqueue(content, text, author_id)
        except Exception as e:
            logger.exception(
                f"Failed to queue re-analysis for {content.content_type.value} "
                f"{content.content_id}: {e}"
            )
