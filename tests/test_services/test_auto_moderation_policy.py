"""Tests for the automatic moderation policy."""

import pytest

from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.services.auto_moderation_policy import AUTO_REJECT_THRESHOLD
from moderation_engine.services.auto_moderation_policy import AutoModerationPolicy
from moderation_engine.services.auto_moderation_policy import ModerationAction
from moderation_engine.services.auto_moderation_policy import classify


def _analysis(flagged: bool, score: int) -> ContentAnalysis:
    return ContentAnalysis(flagged=flagged, flag_score=score, reasoning="test")


class TestAutoModerationPolicy:
    """Test the approve / flag / reject table."""

    @pytest.mark.parametrize(
        ("flagged", "score", "expected"),
        [
            (False, 0, ModerationAction.AUTO_APPROVE),
            (False, 2, ModerationAction.AUTO_APPROVE),
            (False, 100, ModerationAction.AUTO_APPROVE),
            (True, 0, ModerationAction.AUTO_FLAG),
            (True, 55, ModerationAction.AUTO_FLAG),
            (True, 80, ModerationAction.AUTO_FLAG),
            (True, 81, ModerationAction.AUTO_REJECT),
            (True, 91, ModerationAction.AUTO_REJECT),
            (True, 100, ModerationAction.AUTO_REJECT),
        ],
    )
    def test_classify(self, flagged, score, expected):
        """Test the action chosen for each flagged/score combination."""
        decision = classify(_analysis(flagged, score))

        assert decision.action == expected
        assert decision.should_create_flag == (expected != ModerationAction.AUTO_APPROVE)

    def test_default_threshold(self):
        """Test the default reject threshold."""
        assert AUTO_REJECT_THRESHOLD == 80
        assert AutoModerationPolicy().reject_threshold == 80

    def test_custom_threshold(self):
        """Test a lower threshold rejects earlier."""
        policy = AutoModerationPolicy(reject_threshold=50)

        assert policy.classify(_analysis(True, 50)).action == ModerationAction.AUTO_FLAG
        assert policy.classify(_analysis(True, 51)).action == ModerationAction.AUTO_REJECT

    @pytest.mark.parametrize("threshold", [-1, 101])
    def test_threshold_out_of_range(self, threshold):
        """Test thresholds outside 0-100 are refused."""
        with pytest.raises(ValueError, match="reject_threshold"):
            AutoModerationPolicy(reject_threshold=threshold)

    def test_classify_is_deterministic(self):
        """Test the same analysis always yields the same decision."""
        analysis = _analysis(True, 67)
        policy = AutoModerationPolicy()

        assert policy.classify(analysis) == policy.classify(analysis)

    def test_severity_is_monotone_in_score(self):
        """Test raising the score of flagged content never lowers severity."""
        policy = AutoModerationPolicy()
        severities = [
            policy.classify(_analysis(True, score)).action.severity
            for score in range(101)
        ]

        assert severities == sorted(severities)

    def test_unflagged_content_never_creates_flag(self):
        """Test nothing the analyzer did not flag produces a flag."""
        policy = AutoModerationPolicy()

        assert not any(
            policy.classify(_analysis(False, score)).should_create_flag
            for score in range(101)
        )
