"""LLM client service using pydantic-ai for AI model interactions."""

import logging

from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import Field
from pydantic_ai import Agent
from pydantic_ai import RunContext

from moderation_engine.config.settings import LLMSettings
from moderation_engine.config.settings import get_llm_settings
from moderation_engine.database.models.analysis import CategoryScores
from moderation_engine.services.prompt_service import PromptService
from moderation_engine.services.provider_factory import ProviderFactory

logger = logging.getLogger(__name__)


class ContentAssessment(BaseModel):
    """Structured output for content scoring."""

    flagged: bool
    category_scores: CategoryScores
    reasoning: str


class ModeratorAdvice(BaseModel):
    """Structured output for moderator assistance."""

    recommendation: Literal["approve", "reject"]
    reasoning: str
    confidence: int = Field(ge=0, le=100)


class LLMClient:
    """Client for interacting with LLM models using pydantic-ai."""

    def __init__(
        self,
        settings: LLMSettings | None = None,
        prompt_service: PromptService | None = None,
    ):
        self.settings = settings or get_llm_settings()
        self.provider_factory = ProviderFactory(self.settings)
        self.prompt_service = prompt_service or PromptService()

        analysis_config = self.settings.get_agent_config("analysis")
        assist_config = self.settings.get_agent_config("assist")
        for agent_type, config in (
            ("analysis", analysis_config),
            ("assist", assist_config),
        ):
            if not self.provider_factory.validate_provider_config(config):
                logger.warning(
                    f"No credentials configured for {agent_type} provider {config.provider}"
                )

        self.analysis_agent = Agent(
            model=self.provider_factory.create_model(analysis_config),
            output_type=ContentAssessment,
            system_prompt=self.prompt_service.get_analysis_prompt(),
            model_settings={
                "max_tokens": analysis_config.max_tokens,
                "temperature": analysis_config.temperature,
            },
        )

        self.assist_agent = Agent(
            model=self.provider_factory.create_model(assist_config),
            deps_type=dict[str, Any],
            output_type=ModeratorAdvice,
            model_settings={
                "max_tokens": assist_config.max_tokens,
                "temperature": assist_config.temperature,
            },
        )

        @self.assist_agent.system_prompt
        def add_flag_context(ctx: RunContext[dict[str, Any]]) -> str:
            """Dynamic system prompt carrying the flag under review."""
            return self.prompt_service.get_assist_prompt(ctx.deps.get("flag"))

    async def assess_content(self, content: str) -> ContentAssessment:
        """
        Score content against the community guidelines.

        Args:
            content: Raw text to assess

        Returns:
            Structured per-category assessment
        """
        result = await self.analysis_agent.run(f"Assess this content:\n\n{content}")
        return result.output

    async def advise_moderator(
        self, content: str, context: dict[str, Any]
    ) -> ModeratorAdvice:
        """
        Ask for a recommendation on flagged content.

        Args:
            content: The flagged content
            context: Prompt context, ``flag`` holds the flag under review

        Returns:
            Structured recommendation
        """
        result = await self.assist_agent.run(content, deps=context)
        return result.output
