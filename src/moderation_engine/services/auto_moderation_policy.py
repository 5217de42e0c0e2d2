"""Automatic disposition of analysed content."""

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict

from moderation_engine.database.models.analysis import ContentAnalysis

AUTO_REJECT_THRESHOLD = 80


class ModerationAction(str, Enum):
    """What the policy does with analysed content, in increasing severity."""

    AUTO_APPROVE = "auto_approve"
    AUTO_FLAG = "auto_flag"
    AUTO_REJECT = "auto_reject"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    ModerationAction.AUTO_APPROVE: 0,
    ModerationAction.AUTO_FLAG: 1,
    ModerationAction.AUTO_REJECT: 2,
}


class PolicyDecision(BaseModel):
    """Outcome of classifying an analysis."""

    action: ModerationAction
    should_create_flag: bool

    model_config = ConfigDict(frozen=True)


class AutoModerationPolicy:
    """Maps an analysis to approve, flag for review, or reject.

    Content the analyzer did not flag is approved. Flagged content is queued
    for human review unless its score exceeds ``reject_threshold``, in which
    case it is rejected outright.
    """

    def __init__(self, reject_threshold: int = AUTO_REJECT_THRESHOLD):
        if not 0 <= reject_threshold <= 100:
            raise ValueError("reject_threshold must be between 0 and 100")
        self.reject_threshold = reject_threshold

    def classify(self, analysis: ContentAnalysis) -> PolicyDecision:
        if not analysis.flagged:
            return PolicyDecision(
                action=ModerationAction.AUTO_APPROVE, should_create_flag=False
            )
        if analysis.flag_score > self.reject_threshold:
            return PolicyDecision(
                action=ModerationAction.AUTO_REJECT, should_create_flag=True
            )
        return PolicyDecision(action=ModerationAction.AUTO_FLAG, should_create_flag=True)


def classify(
    analysis: ContentAnalysis, reject_threshold: int = AUTO_REJECT_THRESHOLD
) -> PolicyDecision:
    """Classify an analysis with the given threshold."""
    return AutoModerationPolicy(reject_threshold).classify(analysis)
