"""
Sportfolio utilities module.

Provides logging helpers, batch progress tracking, the layout cache
and the thread pool used for batched vision calls.
"""

from .logging import StructuredLogger, BatchStats, setup_console_logging
from .caching import SportfolioCache, get_cache
from .async_processing import AsyncProcessor

__all__ = [
    'StructuredLogger',
    'BatchStats',
    'setup_console_logging',
    'SportfolioCache',
    'get_cache',
    'AsyncProcessor',
]
