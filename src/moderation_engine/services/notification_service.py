"""Outbound notifications for moderation outcomes."""

import logging

from abc import ABC
from abc import abstractmethod
from datetime import UTC
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel
from pydantic import Field
from redis.asyncio import Redis

from moderation_engine.config.settings import get_moderation_settings
from moderation_engine.database.models.base import ContentType
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.flag import ModerationFlag

logger = logging.getLogger(__name__)


class ModerationEvent(BaseModel):
    """Event emitted when a flag reaches a status downstream consumers act on."""

    flag_pk: UUID
    content_type: ContentType
    content_id: int
    status: FlagStatus
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_flag(cls, flag: ModerationFlag) -> "ModerationEvent":
        return cls(
            flag_pk=flag.pk,
            content_type=flag.content.content_type,
            content_id=flag.content.content_id,
            status=flag.status,
        )


class EventPublisher(ABC):
    """Delivers moderation events to downstream consumers."""

    @abstractmethod
    async def publish(self, event: ModerationEvent) -> None:
        """Publish a single event."""


class RedisEventPublisher(EventPublisher):
    """Publishes events as JSON on a Redis pub/sub channel."""

    def __init__(self, redis_client: Redis, channel: str | None = None):
        self.redis_client = redis_client
        self.channel = channel or get_moderation_settings().event_channel

    async def publish(self, event: ModerationEvent) -> None:
        receivers = await self.redis_client.publish(
            self.channel, event.model_dump_json()
        )
        logger.debug(
            f"Published {event.status.value} event for flag {event.flag_pk} "
            f"to {receivers} subscribers"
        )


class NotificationService:
    """Fire-and-forget notifications for flag transitions."""

    NOTIFY_STATUSES = frozenset({FlagStatus.REJECTED})

    def __init__(self, publisher: EventPublisher | None = None):
        self.publisher = publisher

    async def flag_transitioned(self, flag: ModerationFlag) -> None:
        """Announce a flag's new status if consumers care about it."""
        if self.publisher is None or flag.status not in self.NOTIFY_STATUSES:
            return

        try:
            await self.publisher.publish(ModerationEvent.from_flag(flag))
        except Exception as e:
            # Delivery is best-effort; the transition has already committed
            logger.exception(f"Failed to publish event for flag {flag.pk}: {e}")
