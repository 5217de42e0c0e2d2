"""Content analysis results exchanged with the analyzer."""

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class CategoryScores(BaseModel):
    """Per-category risk scores, each 0-100."""

    harassment: int = Field(default=0, ge=0, le=100)
    hate: int = Field(default=0, ge=0, le=100)
    self_harm: int = Field(default=0, ge=0, le=100)
    sexual: int = Field(default=0, ge=0, le=100)
    violence: int = Field(default=0, ge=0, le=100)

    model_config = ConfigDict(frozen=True)

    def overall(self) -> int:
        """Rounded mean of the category scores."""
        scores = list(self.model_dump().values())
        return round(sum(scores) / len(scores))


class ContentAnalysis(BaseModel):
    """Analyzer verdict for a piece of content."""

    flagged: bool
    category_scores: CategoryScores = Field(default_factory=CategoryScores)
    flag_score: int = Field(ge=0, le=100)
    reasoning: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def not_flagged(cls, reasoning: str = "Error analyzing content.") -> "ContentAnalysis":
        """Neutral result used when content could not be analysed."""
        return cls(flagged=False, flag_score=0, reasoning=reasoning)


class RecommendationType(str, Enum):
    """Advice given to a human moderator."""

    APPROVE = "approve"
    REJECT = "reject"
    REVIEW = "review"


class AssistRecommendation(BaseModel):
    """Advisory recommendation shown to a human moderator."""

    recommendation: RecommendationType
    reasoning: str
    confidence: int = Field(ge=0, le=100)
    fallback: bool = False

    model_config = ConfigDict(frozen=True)
