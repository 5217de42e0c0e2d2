"""Base models and types for the moderation engine."""

from datetime import datetime
from enum import Enum
from typing import Annotated
from typing import Literal
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ContentType(str, Enum):
    """Kinds of user content that can be moderated."""

    DISCUSSION = "discussion"
    COMMENT = "comment"
    PROPOSAL = "proposal"
    AMENDMENT = "amendment"
    PROFILE = "profile"
    EVENT = "event"


class FlagStatus(str, Enum):
    """Moderation flag status enumeration."""

    PENDING = "pending"
    AUTO_FLAGGED = "auto_flagged"
    APPROVED = "approved"
    REJECTED = "rejected"
    APPEALED = "appealed"

    @property
    def is_resolved(self) -> bool:
        return self in (FlagStatus.APPROVED, FlagStatus.REJECTED)

    @property
    def awaits_review(self) -> bool:
        return self in (FlagStatus.PENDING, FlagStatus.AUTO_FLAGGED)


class DecisionOutcome(str, Enum):
    """Outcome of a moderation decision or appeal review."""

    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def flag_status(self) -> FlagStatus:
        return FlagStatus(self.value)


class AppealStatus(str, Enum):
    """Appeal status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FlagTransition(str, Enum):
    """Actions that move a flag through its lifecycle."""

    CREATE_REPORT = "create_report"
    CREATE_AUTO_FLAG = "create_auto_flag"
    CREATE_AUTO_REJECT = "create_auto_reject"
    DECIDE = "decide"
    APPEAL_OPEN = "appeal_open"
    APPEAL_RESOLVE = "appeal_resolve"


class HumanActor(BaseModel):
    """A human user acting on a flag."""

    kind: Literal["human"] = "human"
    user_id: int

    model_config = ConfigDict(frozen=True)

    @property
    def is_system(self) -> bool:
        return False


class SystemActor(BaseModel):
    """The automatic moderation policy."""

    kind: Literal["system"] = "system"

    model_config = ConfigDict(frozen=True)

    @property
    def is_system(self) -> bool:
        return True

    @property
    def user_id(self) -> None:
        return None


Actor = Annotated[HumanActor | SystemActor, Field(discriminator="kind")]

SYSTEM_ACTOR = SystemActor()


class ContentReference(BaseModel):
    """Identifies a piece of moderated content without embedding it."""

    content_id: int
    content_type: ContentType

    model_config = ConfigDict(frozen=True)


class BaseDBModel(BaseModel):
    """Base model for stored entities."""

    pk: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)
