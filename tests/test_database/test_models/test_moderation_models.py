"""Tests for moderation models."""

from datetime import UTC
from datetime import datetime
from uuid import uuid4

import pytest

from pydantic import ValidationError

from moderation_engine.database.models.analysis import CategoryScores
from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.database.models.base import SYSTEM_ACTOR
from moderation_engine.database.models.base import DecisionOutcome
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.base import HumanActor
from moderation_engine.database.models.base import SystemActor
from moderation_engine.database.models.decision import ModerationDecisionCreate
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.models.flag import ModerationFlagCreate


class TestFlagStatus:
    """Test FlagStatus helpers."""

    @pytest.mark.parametrize(
        ("status", "resolved", "awaiting"),
        [
            (FlagStatus.PENDING, False, True),
            (FlagStatus.AUTO_FLAGGED, False, True),
            (FlagStatus.APPROVED, True, False),
            (FlagStatus.REJECTED, True, False),
            (FlagStatus.APPEALED, False, False),
        ],
    )
    def test_status_groups(self, status, resolved, awaiting):
        """Test which statuses are resolved or awaiting review."""
        assert status.is_resolved is resolved
        assert status.awaits_review is awaiting

    def test_outcome_maps_to_status(self):
        """Test decision outcomes name their resulting flag status."""
        assert DecisionOutcome.APPROVED.flag_status == FlagStatus.APPROVED
        assert DecisionOutcome.REJECTED.flag_status == FlagStatus.REJECTED


class TestActors:
    """Test the actor union."""

    def test_actor_parsed_by_kind(self):
        """Test the discriminator picks the actor type."""
        now = datetime.now(UTC)
        flag = ModerationFlag.model_validate({
            "pk": uuid4(),
            "content": {"content_id": 1, "content_type": "comment"},
            "reported_by": {"kind": "system"},
            "reason": "auto",
            "status": "auto_flagged",
            "created_at": now,
            "updated_at": now,
        })

        assert isinstance(flag.reported_by, SystemActor)
        assert flag.is_automated
        assert flag.reported_by.user_id is None

    def test_human_requires_user_id(self):
        """Test a human actor without an id is rejected."""
        with pytest.raises(ValidationError):
            ModerationFlagCreate.model_validate({
                "content": {"content_id": 1, "content_type": "comment"},
                "reported_by": {"kind": "human"},
                "reason": "spam",
                "status": "pending",
            })

    def test_system_decision_is_ai_assisted(self):
        """Test decisions by the system are always marked AI-assisted."""
        decision = ModerationDecisionCreate(
            flag_pk=uuid4(),
            moderator=SYSTEM_ACTOR,
            decision=DecisionOutcome.REJECTED,
            reasoning="auto",
        )

        assert decision.ai_assisted is True

    def test_human_decision_not_ai_assisted(self):
        """Test human decisions default to not AI-assisted."""
        decision = ModerationDecisionCreate(
            flag_pk=uuid4(),
            moderator=HumanActor(user_id=5),
            decision=DecisionOutcome.APPROVED,
            reasoning="fine",
        )

        assert decision.ai_assisted is False

    def test_empty_reasoning_rejected(self):
        """Test a decision needs reasoning."""
        with pytest.raises(ValidationError):
            ModerationDecisionCreate(
                flag_pk=uuid4(),
                moderator=HumanActor(user_id=5),
                decision=DecisionOutcome.APPROVED,
                reasoning="",
            )


class TestContentAnalysis:
    """Test analysis models."""

    def test_overall_is_rounded_mean(self):
        """Test the overall score is the rounded category mean."""
        scores = CategoryScores(harassment=90, hate=70, violence=20)

        assert scores.overall() == 36

    def test_score_bounds(self):
        """Test scores outside 0-100 are invalid."""
        with pytest.raises(ValidationError):
            ContentAnalysis(flagged=True, flag_score=101)

    def test_not_flagged(self):
        """Test the neutral result."""
        analysis = ContentAnalysis.not_flagged()

        assert analysis.flagged is False
        assert analysis.flag_score == 0
