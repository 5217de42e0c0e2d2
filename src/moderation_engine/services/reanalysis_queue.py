"""Deferred re-analysis of content whose first analysis failed."""

import logging

from abc import ABC
from abc import abstractmethod

from arq.connections import ArqRedis

from moderation_engine.config.settings import get_moderation_settings
from moderation_engine.database.models.base import ContentReference

logger = logging.getLogger(__name__)

REANALYSIS_QUEUE = "moderation_reanalysis"
REANALYZE_JOB = "reanalyze_content"


class ReanalysisQueue(ABC):
    """Schedules content for another pass through the analyzer."""

    @abstractmethod
    async def enqueue(
        self, content: ContentReference, text: str, author_id: int | None = None
    ) -> None:
        """Schedule a re-analysis of ``text``."""


class ArqReanalysisQueue(ReanalysisQueue):
    """Enqueues ``reanalyze_content`` jobs for the arq re-analysis worker."""

    def __init__(self, pool: ArqRedis, delay_seconds: int | None = None):
        self.pool = pool
        self.delay_seconds = (
            delay_seconds
            if delay_seconds is not None
            else get_moderation_settings().reanalysis_delay_seconds
        )

    async def enqueue(
        self, content: ContentReference, text: str, author_id: int | None = None
    ) -> None:
        job = await self.pool.enqueue_job(
            REANALYZE_JOB,
            content.content_type.value,
            content.content_id,
            text,
            author_id,
            _queue_name=REANALYSIS_QUEUE,
            _defer_by=self.delay_seconds,
        )
        if job is None:
            logger.debug(
                f"Re-analysis of {content.content_type.value} "
                f"{content.content_id} already queued"
            )
            return
        logger.info(
            f"Queued re-analysis job {job.job_id} for {content.content_type.value} "
            f"{content.content_id} in {self.delay_seconds}s"
        )
