"""Test configuration and fixtures for the moderation engine tests."""

from contextlib import asynccontextmanager
from datetime import UTC
from datetime import datetime
from unittest.mock import AsyncMock
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from moderation_engine.config.settings import ModerationSettings
from moderation_engine.database.models.analysis import CategoryScores
from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import ContentType
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.base import HumanActor
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.repositories.memory import InMemoryFlagStore
from moderation_engine.services.appeal_processor import AppealProcessor
from moderation_engine.services.content_analyzer import ContentAnalyzer
from moderation_engine.services.content_source import ContentSnapshot
from moderation_engine.services.content_source import InMemoryContentSource
from moderation_engine.services.flag_lifecycle import FlagLifecycle
from moderation_engine.services.notification_service import EventPublisher
from moderation_engine.services.notification_service import NotificationService


@pytest.fixture
def mock_connection():
    """Mock database connection for testing."""
    connection = AsyncMock()
    connection.fetchval = AsyncMock()
    connection.fetchrow = AsyncMock()
    connection.fetch = AsyncMock()
    connection.execute = AsyncMock()
    return connection


@pytest.fixture
def mock_database(mock_connection):
    """Database whose connections and transactions yield the mock connection."""
    database = MagicMock()

    @asynccontextmanager
    async def get_connection():
        yield mock_connection

    database.get_connection = get_connection
    database.get_transaction = get_connection
    return database


@pytest.fixture
def moderation_settings() -> ModerationSettings:
    """Moderation settings with the default policy values."""
    return ModerationSettings()


@pytest.fixture
def memory_store() -> InMemoryFlagStore:
    """Empty in-memory flag store."""
    return InMemoryFlagStore()


@pytest.fixture
def mock_publisher():
    """Mock event publisher."""
    return AsyncMock(spec=EventPublisher)


@pytest.fixture
def notifications(mock_publisher) -> NotificationService:
    """Notification service backed by the mock publisher."""
    return NotificationService(mock_publisher)


@pytest.fixture
def lifecycle(memory_store, notifications, moderation_settings) -> FlagLifecycle:
    """Flag lifecycle over the in-memory store."""
    return FlagLifecycle(memory_store, notifications, moderation_settings)


@pytest.fixture
def appeal_processor(memory_store, lifecycle) -> AppealProcessor:
    """Appeal processor sharing the lifecycle's store."""
    return AppealProcessor(memory_store, lifecycle)


@pytest.fixture
def discussion_ref() -> ContentReference:
    """Reference to a discussion."""
    return ContentReference(content_id=42, content_type=ContentType.DISCUSSION)


@pytest.fixture
def content_source(discussion_ref) -> InMemoryContentSource:
    """Content source holding the sample discussion."""
    return InMemoryContentSource(
        [
            ContentSnapshot(
                content=discussion_ref,
                title="Weekly thread",
                body="You are all idiots",
                author_id=7,
            )
        ]
    )


@pytest.fixture
def mock_analyzer():
    """Mock content analyzer."""
    return AsyncMock(spec=ContentAnalyzer)


@pytest.fixture
def make_analysis():
    """Factory for analyzer results."""

    def _make(
        flagged: bool = True, score: int = 50, reasoning: str = "Hostile language"
    ) -> ContentAnalysis:
        return ContentAnalysis(
            flagged=flagged,
            category_scores=CategoryScores(harassment=score),
            flag_score=score,
            reasoning=reasoning,
        )

    return _make


@pytest.fixture
def sample_flag(discussion_ref):
    """Factory for standalone flags, not stored anywhere."""

    def _create_flag(status: FlagStatus = FlagStatus.PENDING, version: int = 1):
        now = datetime.now(UTC)
        return ModerationFlag(
            pk=uuid4(),
            content=discussion_ref,
            reported_by=HumanActor(user_id=3),
            reason="Insulting other members",
            status=status,
            version=version,
            created_at=now,
            updated_at=now,
        )

    return _create_flag
