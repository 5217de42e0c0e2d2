"""Moderation flag models."""

from datetime import datetime

from pydantic import BaseModel
from pydantic import Field

from moderation_engine.database.models.base import Actor
from moderation_engine.database.models.base import BaseDBModel
from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import FlagStatus


class ModerationFlag(BaseDBModel):
    """A record asserting that a piece of content needs moderation attention."""

    content: ContentReference
    reported_by: Actor
    reason: str
    ai_score: int | None = Field(default=None, ge=0, le=100)
    ai_reasoning: str | None = None
    status: FlagStatus
    version: int = Field(default=1, ge=1)
    updated_at: datetime

    @property
    def is_automated(self) -> bool:
        """Whether the flag was raised by the auto-moderation policy."""
        return self.reported_by.is_system


class ModerationFlagCreate(BaseModel):
    """Model for creating a new flag."""

    content: ContentReference
    reported_by: Actor
    reason: str = Field(..., min_length=1)
    ai_score: int | None = Field(default=None, ge=0, le=100)
    ai_reasoning: str | None = None
    status: FlagStatus
