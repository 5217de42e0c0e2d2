"""Lookup of the content a flag points at."""

from abc import ABC
from abc import abstractmethod

from pydantic import BaseModel
from pydantic import ConfigDict

from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import ContentType

# Content types whose body is labelled "Description" rather than "Content"
DESCRIBED_TYPES = frozenset({ContentType.PROPOSAL, ContentType.AMENDMENT})


class ContentSnapshot(BaseModel):
    """Text and authorship of a content item at lookup time."""

    content: ContentReference
    body: str
    title: str | None = None
    author_id: int | None = None

    model_config = ConfigDict(frozen=True)

    def as_text(self) -> str:
        """Render the snapshot the way the analyzer expects to read it."""
        if not self.title:
            return self.body
        label = (
            "Description"
            if self.content.content_type in DESCRIBED_TYPES
            else "Content"
        )
        return f"Title: {self.title}\n{label}: {self.body}"


class ContentSource(ABC):
    """Resolves content references owned by the host application."""

    @abstractmethod
    async def get_content(self, ref: ContentReference) -> ContentSnapshot | None:
        """Return the content, or None if it no longer exists."""


class InMemoryContentSource(ContentSource):
    """ContentSource over snapshots registered in-process."""

    def __init__(self, snapshots: list[ContentSnapshot] | None = None):
        self._snapshots = {snapshot.content: snapshot for snapshot in snapshots or []}

    def add(self, snapshot: ContentSnapshot) -> None:
        self._snapshots[snapshot.content] = snapshot

    async def get_content(self, ref: ContentReference) -> ContentSnapshot | None:
        return self._snapshots.get(ref)
