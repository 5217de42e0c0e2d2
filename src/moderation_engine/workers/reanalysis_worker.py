"""Arq worker that re-runs automatic moderation on content whose analysis failed."""

import logging

from typing import Any

from arq import Retry

from moderation_engine.config.settings import get_settings
from moderation_engine.database.connection import Database
from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import ContentType
from moderation_engine.database.repositories.flag_store import PostgresFlagStore
from moderation_engine.exceptions import AnalyzerUnavailableError
from moderation_engine.services.content_analyzer import LLMContentAnalyzer
from moderation_engine.services.moderation_service import ModerationService
from moderation_engine.services.notification_service import NotificationService
from moderation_engine.services.notification_service import RedisEventPublisher
from moderation_engine.services.reanalysis_queue import REANALYSIS_QUEUE
from moderation_engine.services.reputation_service import PostgresReputationLedger
from moderation_engine.services.reputation_service import ReputationService
from moderation_engine.workers.redis_connection import RedisConnection
from moderation_engine.workers.redis_connection import get_arq_redis_settings

logger = logging.getLogger(__name__)


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup hook."""
    settings = get_settings()
    database = Database(settings.database)
    await database.connect()
    redis_connection = RedisConnection(settings.redis)
    publisher = RedisEventPublisher(
        await redis_connection.get_redis_client(), settings.moderation.event_channel
    )

    ctx["database"] = database
    ctx["redis_connection"] = redis_connection
    # No re-analysis queue here: failures are retried by arq instead
    ctx["moderation_service"] = ModerationService(
        store=PostgresFlagStore(database),
        analyzer=LLMContentAnalyzer(),
        notifications=NotificationService(publisher),
        reputation=ReputationService(
            PostgresReputationLedger(database), settings.moderation
        ),
        settings=settings.moderation,
    )
    logger.info("Re-analysis worker started")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown hook."""
    logger.info("Shutting down re-analysis worker")
    if "redis_connection" in ctx:
        await ctx["redis_connection"].close()
    if "database" in ctx:
        await ctx["database"].disconnect()


async def reanalyze_content(
    ctx: dict[str, Any],
    content_type: str,
    content_id: int,
    text: str,
    author_id: int | None = None,
) -> str:
    """Run content through analysis and policy again.

    Returns the resulting auto-moderation status. While the analyzer is still
    unavailable the job is retried with a growing delay until ``max_tries``.
    """
    service: ModerationService = ctx["moderation_service"]
    content = ContentReference(
        content_id=content_id, content_type=ContentType(content_type)
    )
    job_try = ctx.get("job_try", 1)
    logger.info(f"Re-analysing {content_type} {content_id} (attempt {job_try})")

    try:
        result = await service.moderate(content, text, author_id)
    except AnalyzerUnavailableError as e:
        logger.warning(f"Re-analysis of {content_type} {content_id} failed: {e}")
        raise Retry(defer=job_try * service.settings.reanalysis_delay_seconds) from e

    logger.info(
        f"Re-analysis of {content_type} {content_id} finished: {result.status.value}"
    )
    return result.status.value


class WorkerSettings:
    """Arq settings for the re-analysis worker."""

    functions = [reanalyze_content]
    on_startup = startup
    on_shutdown = shutdown
    queue_name = REANALYSIS_QUEUE
    redis_settings = get_arq_redis_settings()
    max_jobs = 5
    job_timeout = 120
    max_tries = 3
    keep_result = 3600
