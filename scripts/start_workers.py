#!/usr/bin/env python3
"""
Worker startup script for the moderation engine.

Starts the Arq re-analysis worker, which retries automatic moderation for
content whose analysis failed when it was created.
"""

import asyncio
import logging
import signal
import sys

from arq.worker import Worker

from moderation_engine.config.settings import get_settings
from moderation_engine.workers.reanalysis_worker import WorkerSettings

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class WorkerManager:
    """Runs the re-analysis worker until a shutdown signal arrives."""

    def __init__(self):
        self.worker: Worker | None = None
        self.shutdown_event = asyncio.Event()

    async def start(self):
        """Start the worker and wait for shutdown."""
        try:
            self.worker = Worker(
                functions=WorkerSettings.functions,
                queue_name=WorkerSettings.queue_name,
                redis_settings=WorkerSettings.redis_settings,
                on_startup=WorkerSettings.on_startup,
                on_shutdown=WorkerSettings.on_shutdown,
                max_jobs=WorkerSettings.max_jobs,
                job_timeout=WorkerSettings.job_timeout,
                max_tries=WorkerSettings.max_tries,
                keep_result=WorkerSettings.keep_result,
                handle_signals=False,
            )
            task = asyncio.create_task(self._run_worker(self.worker))
            logger.info("Started re-analysis worker")

            await self.shutdown_event.wait()
            task.cancel()

        except Exception as e:
            logger.exception(f"Failed to start worker: {e}")
            raise
        finally:
            await self.cleanup()

    async def _run_worker(self, worker: Worker):
        """Run the worker, requesting shutdown if it dies."""
        try:
            await worker.async_run()
        except Exception as e:
            logger.exception(f"Re-analysis worker failed: {e}")
            self.shutdown_event.set()

    async def cleanup(self):
        """Clean up resources."""
        logger.info("Shutting down worker...")
        if self.worker is not None:
            try:
                await self.worker.close()
            except Exception as e:
                logger.error(f"Error closing worker: {e}")
        logger.info("Cleanup complete")

    def handle_shutdown(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, initiating shutdown...")
        self.shutdown_event.set()


async def main():
    """Main entry point."""
    manager = WorkerManager()

    signal.signal(signal.SIGINT, manager.handle_shutdown)
    signal.signal(signal.SIGTERM, manager.handle_shutdown)

    try:
        await manager.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.exception(f"Worker manager failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
