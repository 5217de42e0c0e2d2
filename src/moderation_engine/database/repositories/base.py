"""Storage contract for flags, decisions and appeals."""

from abc import ABC
from abc import abstractmethod
from contextlib import AbstractAsyncContextManager
from uuid import UUID

from moderation_engine.database.models.appeal import AppealCreate
from moderation_engine.database.models.appeal import AppealUpdate
from moderation_engine.database.models.appeal import ModerationAppeal
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.decision import ModerationDecision
from moderation_engine.database.models.decision import ModerationDecisionCreate
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.models.flag import ModerationFlagCreate


class FlagStore(ABC):
    """Persistence for the moderation lifecycle.

    Records are created and updated but never deleted. Status writes on flags
    and appeals are versioned: an update carries the version the caller read
    and fails with ``ConflictError`` if another writer got there first.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager["FlagStore"]:
        """Open a unit of work.

        Writes made through the yielded store become visible to other readers
        together when the block exits normally, and are discarded if it raises.
        """

    @abstractmethod
    async def create_flag(self, flag_data: ModerationFlagCreate) -> ModerationFlag:
        """Create a new flag at version 1."""

    @abstractmethod
    async def get_flag(self, pk: UUID) -> ModerationFlag | None:
        """Get a flag by primary key."""

    @abstractmethod
    async def list_flags_by_status(
        self, status: FlagStatus, limit: int = 100, offset: int = 0
    ) -> list[ModerationFlag]:
        """List flags in a status, oldest first."""

    @abstractmethod
    async def update_flag_status(
        self, pk: UUID, status: FlagStatus, expected_version: int
    ) -> ModerationFlag:
        """Set a flag's status if it is still at ``expected_version``."""

    @abstractmethod
    async def create_decision(
        self, decision_data: ModerationDecisionCreate
    ) -> ModerationDecision:
        """Append a decision record."""

    @abstractmethod
    async def list_decisions(self, flag_pk: UUID) -> list[ModerationDecision]:
        """List decisions for a flag, oldest first."""

    @abstractmethod
    async def create_appeal(self, appeal_data: AppealCreate) -> ModerationAppeal:
        """Create a pending appeal at version 1."""

    @abstractmethod
    async def get_appeal(self, pk: UUID) -> ModerationAppeal | None:
        """Get an appeal by primary key."""

    @abstractmethod
    async def get_pending_appeal(self, flag_pk: UUID) -> ModerationAppeal | None:
        """Get the pending appeal for a flag, if one exists."""

    @abstractmethod
    async def list_appeals(self, flag_pk: UUID) -> list[ModerationAppeal]:
        """List appeals filed against a flag, oldest first."""

    @abstractmethod
    async def update_appeal(
        self, pk: UUID, appeal_update: AppealUpdate, expected_version: int
    ) -> ModerationAppeal:
        """Apply review fields to an appeal if it is still at ``expected_version``."""
