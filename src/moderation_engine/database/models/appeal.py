"""Moderation appeal models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel
from pydantic import Field

from moderation_engine.database.models.base import AppealStatus
from moderation_engine.database.models.base import BaseDBModel


class ModerationAppeal(BaseDBModel):
    """Request to reopen a resolved flag."""

    flag_pk: UUID
    user_id: int
    reasoning: str
    status: AppealStatus = AppealStatus.PENDING
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    version: int = Field(default=1, ge=1)

    @property
    def is_pending(self) -> bool:
        return self.status == AppealStatus.PENDING


class AppealCreate(BaseModel):
    """Appeal creation model."""

    flag_pk: UUID
    user_id: int
    reasoning: str = Field(..., min_length=1)


class AppealUpdate(BaseModel):
    """Fields written when an appeal is reviewed."""

    status: AppealStatus
    reviewed_by: int
    reviewed_at: datetime
