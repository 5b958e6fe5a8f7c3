"""Periodic purge of expired download tokens.

Tokens live in the API process, so the sweeper runs as an asyncio task
inside that process (started from the FastAPI lifespan) rather than as a
separate worker.
"""

import asyncio
import logging

from domain.editing import DownloadTokenStore
from observability.metrics import download_tokens_active

logger = logging.getLogger(__name__)


async def sweep_tokens_periodically(store: DownloadTokenStore, interval_seconds: float) -> None:
    """Run store.sweep() every interval_seconds until cancelled."""
    logger.info(f"Token sweeper started (interval={interval_seconds}s)")
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            store.sweep()
            download_tokens_active.set(len(store))
    except asyncio.CancelledError:
        logger.info("Token sweeper stopped")
        raise


def start_token_sweeper(store: DownloadTokenStore, interval_seconds: float) -> asyncio.Task:
    return asyncio.create_task(sweep_tokens_periodically(store, interval_seconds))
