"""Content analysis backed by the LLM client."""

import asyncio
import logging

from abc import ABC
from abc import abstractmethod

from moderation_engine.config.settings import get_llm_settings
from moderation_engine.database.models.analysis import AssistRecommendation
from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.database.models.analysis import RecommendationType
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.exceptions import AnalyzerUnavailableError
from moderation_engine.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

DEFAULT_FLAGGED_REASONING = "Content may violate community guidelines."


class ContentAnalyzer(ABC):
    """Scores content and explains flags for human moderators.

    Implementations raise ``AnalyzerUnavailableError`` on any failure; callers
    decide how to degrade.
    """

    @abstractmethod
    async def analyze(self, text: str) -> ContentAnalysis:
        """Score raw text."""

    @abstractmethod
    async def explain(
        self, text: str, flag: ModerationFlag | None = None
    ) -> AssistRecommendation:
        """Recommend approve or reject for flagged text."""


class LLMContentAnalyzer(ContentAnalyzer):
    """ContentAnalyzer that asks an LLM for structured verdicts."""

    def __init__(self, llm_client: LLMClient | None = None, timeout: float | None = None):
        self.llm_client = llm_client or LLMClient()
        self.timeout = timeout if timeout is not None else get_llm_settings().analysis_timeout

    async def analyze(self, text: str) -> ContentAnalysis:
        try:
            assessment = await asyncio.wait_for(
                self.llm_client.assess_content(text), timeout=self.timeout
            )
        except TimeoutError as e:
            raise AnalyzerUnavailableError(
                f"Content analysis timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            raise AnalyzerUnavailableError(f"Content analysis failed: {e}") from e

        reasoning = assessment.reasoning.strip()
        if assessment.flagged and not reasoning:
            reasoning = DEFAULT_FLAGGED_REASONING

        return ContentAnalysis(
            flagged=assessment.flagged,
            category_scores=assessment.category_scores,
            flag_score=assessment.category_scores.overall(),
            reasoning=reasoning,
        )

    async def explain(
        self, text: str, flag: ModerationFlag | None = None
    ) -> AssistRecommendation:
        try:
            advice = await asyncio.wait_for(
                self.llm_client.advise_moderator(text, {"flag": flag}),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            raise AnalyzerUnavailableError(
                f"Moderator assistance timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            raise AnalyzerUnavailableError(f"Moderator assistance failed: {e}") from e

        return AssistRecommendation(
            recommendation=RecommendationType(advice.recommendation.lower()),
            reasoning=advice.reasoning,
            confidence=advice.confidence,
        )
