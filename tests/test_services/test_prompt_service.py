"""Tests for the prompt service."""

import pytest

from moderation_engine.database.models.base import FlagStatus
from moderation_engine.services.prompt_service import PromptService


@pytest.fixture
def prompts():
    """Prompt service over the packaged templates."""
    return PromptService()


class TestPromptService:
    """Test template loading."""

    def test_analysis_prompt(self, prompts):
        """Test the analysis prompt is loaded from the package."""
        assert prompts.get_analysis_prompt()

    def test_assist_prompt_includes_flag(self, prompts, sample_flag):
        """Test the assist prompt is filled from the flag."""
        flag = sample_flag(FlagStatus.AUTO_FLAGGED).model_copy(
            update={"ai_score": 50, "ai_reasoning": "Hostile language"}
        )

        prompt = prompts.get_assist_prompt(flag)

        assert flag.reason in prompt
        assert "50/100" in prompt
        assert "Hostile language" in prompt

    def test_assist_prompt_without_flag(self, prompts):
        """Test placeholders are filled when no flag is given."""
        prompt = prompts.get_assist_prompt()

        assert "{" not in prompt
        assert "n/a/100" in prompt

    def test_templates_are_cached(self, prompts):
        """Test a template is read once."""
        prompts.get_analysis_prompt()

        assert "content_analysis" in prompts._template_cache

    def test_missing_template(self, tmp_path):
        """Test a missing template raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            PromptService(tmp_path).get_analysis_prompt()
