"""Prompt service for loading the moderation prompt templates."""

from pathlib import Path

from moderation_engine.database.models.flag import ModerationFlag


class PromptService:
    """Service for loading and filling markdown prompt templates."""

    def __init__(self, prompts_dir: Path | None = None):
        self.prompts_dir = prompts_dir or Path(__file__).parent.parent / "prompts"
        self._template_cache: dict[str, str] = {}

    def _load_template(self, name: str) -> str:
        """Load a template from the prompts directory, caching it."""
        if name not in self._template_cache:
            template_path = self.prompts_dir / f"{name}.md"
            if not template_path.exists():
                raise FileNotFoundError(f"Prompt template not found: {template_path}")
            self._template_cache[name] = template_path.read_text().strip()
        return self._template_cache[name]

    def get_analysis_prompt(self) -> str:
        """Get the system prompt used to score content."""
        return self._load_template("content_analysis")

    def get_assist_prompt(self, flag: ModerationFlag | None = None) -> str:
        """
        Get the system prompt used to advise a human moderator.

        Args:
            flag: The flag under review, used to give the model the original
                report and any automated assessment

        Returns:
            Prompt with the flag context filled in
        """
        template = self._load_template("moderator_assist")
        return template.format(
            reason=flag.reason if flag else "unknown",
            ai_score=flag.ai_score if flag and flag.ai_score is not None else "n/a",
            ai_reasoning=flag.ai_reasoning if flag and flag.ai_reasoning else "none",
        )
