"""
Async batch processing for Sportfolio.

Blocking I/O (image downloads, vision API calls) runs in a thread pool
behind asyncio. Items are processed in fixed-size windows: every item of a
window is in flight together, the whole window is awaited, and a flat delay
separates windows.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class AsyncProcessor:
    """
    Thread-pool backed batch runner.
    """

    def __init__(self, max_workers: int = 50, sleep: Optional[Callable] = None):
        """
        Initialize the async processor.

        Args:
            max_workers: Thread pool size; at least the batch size so a
                whole batch can be in flight
            sleep: Coroutine function used for the pause between batches
        """
        self.max_workers = max_workers
        self.thread_pool = ThreadPoolExecutor(max_workers=max_workers)
        self._sleep = sleep or asyncio.sleep
        self._shutdown = False
        logger.debug(f"AsyncProcessor initialized: {self.max_workers} threads")

    async def run_in_thread(self, func: Callable, *args, **kwargs) -> Any:
        """
        Run a blocking function in the thread pool.
        """
        if self._shutdown:
            raise RuntimeError("AsyncProcessor is shutting down")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.thread_pool, partial(func, *args, **kwargs))

    async def batch_process(self, items: List[Any], func: Callable,
                            batch_size: int = 50, batch_delay: float = 0.0,
                            on_batch: Optional[Callable[[List[Any], List[Any]], None]] = None
                            ) -> List[Any]:
        """
        Process items in concurrent fixed-size batches.

        Args:
            items: Items to process
            func: Blocking function applied to each item
            batch_size: Items in flight per batch
            batch_delay: Seconds to wait between batches, never after the last
            on_batch: Called with (batch, results) after each batch completes;
                exceptions raised by func arrive as result values

        Returns:
            Results (or exceptions) in input order
        """
        if not items:
            return []

        results: List[Any] = []
        total = len(items)

        for start in range(0, total, batch_size):
            batch = items[start:start + batch_size]
            tasks = [self.run_in_thread(func, item) for item in batch]
            batch_results = await asyncio.gather(*tasks, return_exceptions=True)
            results.extend(batch_results)

            if on_batch:
                on_batch(batch, list(batch_results))

            logger.debug(f"Completed batch {start // batch_size + 1}, "
                         f"total progress: {len(results)}/{total}")

            if start + batch_size < total and batch_delay > 0:
                await self._sleep(batch_delay)

        return results

    def shutdown(self):
        self._shutdown = True
        self.thread_pool.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
