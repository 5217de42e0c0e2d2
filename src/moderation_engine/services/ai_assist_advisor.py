"""Advisory recommendations for human moderators."""

import asyncio
import logging

from uuid import UUID

from moderation_engine.database.models.analysis import AssistRecommendation
from moderation_engine.database.models.analysis import RecommendationType
from moderation_engine.database.repositories.base import FlagStore
from moderation_engine.exceptions import NotFoundError
from moderation_engine.services.content_analyzer import ContentAnalyzer
from moderation_engine.services.content_source import ContentSource

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "AI assistance unavailable; manual review required."


def fallback_recommendation() -> AssistRecommendation:
    return AssistRecommendation(
        recommendation=RecommendationType.REVIEW,
        reasoning=FALLBACK_REASONING,
        confidence=0,
        fallback=True,
    )


class AIAssistAdvisor:
    """Asks the analyzer how a flag should be decided. Never writes."""

    def __init__(
        self,
        store: FlagStore,
        analyzer: ContentAnalyzer,
        content_source: ContentSource,
        timeout: float | None = None,
    ):
        self.store = store
        self.analyzer = analyzer
        self.content_source = content_source
        self.timeout = timeout

    async def recommend(self, flag_pk: UUID) -> AssistRecommendation:
        flag = await self.store.get_flag(flag_pk)
        if flag is None:
            raise NotFoundError(f"Flag {flag_pk} not found")

        snapshot = await self.content_source.get_content(flag.content)
        if snapshot is None:
            raise NotFoundError(
                f"{flag.content.content_type.value.capitalize()} "
                f"{flag.content.content_id} not found"
            )

        try:
            recommendation = await asyncio.wait_for(
                self.analyzer.explain(snapshot.as_text(), flag), timeout=self.timeout
            )
        except Exception as e:
            logger.warning(f"AI assistance failed for flag {flag_pk}: {e!r}")
            return fallback_recommendation()

        if not isinstance(recommendation, AssistRecommendation):
            logger.warning(
                f"AI assistance for flag {flag_pk} returned "
                f"{type(recommendation).__name__}"
            )
            return fallback_recommendation()
        return recommendation
