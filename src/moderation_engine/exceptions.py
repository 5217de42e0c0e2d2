"""Exception types raised by the moderation engine."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moderation_engine.database.models.base import FlagStatus
    from moderation_engine.database.models.base import FlagTransition


class ModerationError(Exception):
    """Base class for moderation engine errors."""


class AnalyzerUnavailableError(ModerationError):
    """Raised when the content analyzer fails, times out or returns garbage."""


class InvalidTransitionError(ModerationError):
    """Raised when a flag transition is not allowed from its current status."""

    def __init__(
        self, current_status: "FlagStatus | None", transition: "FlagTransition"
    ):
        self.current_status = current_status
        self.transition = transition
        status = current_status.value if current_status else "none"
        super().__init__(
            f"Cannot apply '{transition.value}' to a flag in status '{status}'"
        )


class AppealNotAllowedError(ModerationError):
    """Raised when an appeal cannot be filed against a flag."""


class AppealAlreadyResolvedError(ModerationError):
    """Raised when resolving an appeal that is no longer pending."""


class ConflictError(ModerationError):
    """Raised when a versioned write loses a race with a concurrent writer."""

    def __init__(self, entity: str, pk: object, expected_version: int):
        self.entity = entity
        self.pk = pk
        self.expected_version = expected_version
        super().__init__(
            f"{entity} {pk} was modified concurrently "
            f"(expected version {expected_version})"
        )


class NotFoundError(ModerationError):
    """Raised when a referenced flag, appeal or content item does not exist."""
