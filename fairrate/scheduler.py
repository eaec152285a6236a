"""Recurring background jobs owned by the application lifespan."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

LOG = logging.getLogger(__name__)


async def run_periodically(job: Callable[[], object], interval_seconds: float, name: str) -> None:
    """Run the blocking ``job`` in a worker thread every ``interval_seconds``.

    The first run happens after one full interval. A failing run is logged
    and the schedule continues; only cancellation stops the loop.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(job)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOG.exception("Background job %s failed; will retry in %ss", name, interval_seconds)


def start_periodic(job: Callable[[], object], interval_seconds: float, name: str) -> asyncio.Task:
    LOG.info("Scheduling %s every %ss", name, interval_seconds)
    return asyncio.create_task(run_periodically(job, interval_seconds, name), name=name)


async def stop_periodic(task: asyncio.Task) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
