"""Moderation decision models."""

from uuid import UUID

from pydantic import BaseModel
from pydantic import Field
from pydantic import model_validator

from moderation_engine.database.models.base import Actor
from moderation_engine.database.models.base import BaseDBModel
from moderation_engine.database.models.base import DecisionOutcome


class ModerationDecision(BaseDBModel):
    """Append-only judgement recorded against a flag."""

    flag_pk: UUID
    moderator: Actor
    decision: DecisionOutcome
    reasoning: str
    ai_assisted: bool = False


class ModerationDecisionCreate(BaseModel):
    """Model for recording a decision."""

    flag_pk: UUID
    moderator: Actor
    decision: DecisionOutcome
    reasoning: str = Field(..., min_length=1)
    ai_assisted: bool = False

    @model_validator(mode="after")
    def system_decisions_are_ai_assisted(self) -> "ModerationDecisionCreate":
        if self.moderator.is_system:
            self.ai_assisted = True
        return self
