"""Tests for content snapshots and the in-memory content source."""

import pytest

from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import ContentType
from moderation_engine.services.content_source import ContentSnapshot
from moderation_engine.services.content_source import InMemoryContentSource


def _snapshot(content_type: ContentType, title: str | None = None) -> ContentSnapshot:
    return ContentSnapshot(
        content=ContentReference(content_id=1, content_type=content_type),
        title=title,
        body="Body text",
        author_id=5,
    )


class TestContentSnapshot:
    """Test how content is rendered for analysis."""

    def test_discussion_with_title(self):
        """Test discussions render title and content."""
        snapshot = _snapshot(ContentType.DISCUSSION, "Hello")
        assert snapshot.as_text() == "Title: Hello\nContent: Body text"

    @pytest.mark.parametrize("content_type", [ContentType.PROPOSAL, ContentType.AMENDMENT])
    def test_proposals_use_description(self, content_type):
        """Test proposals and amendments label their body as a description."""
        snapshot = _snapshot(content_type, "Fund the park")
        assert snapshot.as_text() == "Title: Fund the park\nDescription: Body text"

    def test_comment_is_plain_body(self):
        """Test untitled content renders as its body."""
        assert _snapshot(ContentType.COMMENT).as_text() == "Body text"


class TestInMemoryContentSource:
    """Test the in-memory content source."""

    @pytest.mark.asyncio
    async def test_lookup(self):
        """Test registered content is found and unknown content is not."""
        snapshot = _snapshot(ContentType.COMMENT)
        source = InMemoryContentSource()
        source.add(snapshot)

        assert await source.get_content(snapshot.content) == snapshot
        assert (
            await source.get_content(
                ContentReference(content_id=2, content_type=ContentType.COMMENT)
            )
            is None
        )
