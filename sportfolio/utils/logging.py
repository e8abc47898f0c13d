"""
Logging utilities for Sportfolio
Provides structured logging and batch progress tracking
"""

import logging
import sys
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

import colorlog

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata"""
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message, **kwargs))


class BatchStats:
    """Tracks progress, failures and spend of a batch job"""

    def __init__(self, total: int = 0, label: str = "Batch"):
        self.label = label
        self.start_time = datetime.now()
        self.total = total
        self.processed = 0
        self.successful = 0
        self.failed = 0
        self.skipped = 0
        self.total_cost = 0.0
        self.errors: List[Dict[str, Any]] = []

    def set_total(self, total: int):
        """Set total number of items to process"""
        self.total = total

    def add_success(self, cost: float = 0.0):
        self.processed += 1
        self.successful += 1
        self.total_cost += cost or 0.0

    def add_failure(self, item_id: str, error: str):
        """Record a failed item; the batch keeps going."""
        self.processed += 1
        self.failed += 1
        self.errors.append({
            'item': item_id,
            'error': error,
            'time': datetime.now()
        })

    def add_skip(self):
        self.processed += 1
        self.skipped += 1

    def get_progress_percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.processed / self.total) * 100

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_rate_per_minute(self) -> float:
        elapsed_min = self.get_elapsed_time() / 60
        if elapsed_min <= 0:
            return 0.0
        return self.processed / elapsed_min

    def get_estimated_remaining_minutes(self) -> float:
        rate = self.get_rate_per_minute()
        if rate <= 0:
            return 0.0
        return (self.total - self.processed) / rate

    def get_summary(self) -> Dict[str, Any]:
        """Get processing summary"""
        return {
            'label': self.label,
            'total': self.total,
            'processed': self.processed,
            'successful': self.successful,
            'failed': self.failed,
            'skipped': self.skipped,
            'total_cost': round(self.total_cost, 6),
            'errors': len(self.errors),
            'elapsed_seconds': self.get_elapsed_time(),
            'rate_per_minute': self.get_rate_per_minute(),
            'remaining_minutes': self.get_estimated_remaining_minutes(),
        }

    def format_progress(self) -> str:
        """One progress block, printed after each batch"""
        summary = self.get_summary()
        lines = [
            f"{self.label} progress",
            f"  Processed:  {summary['processed']:>6}/{summary['total']} ({self.get_progress_percentage():.1f}%)",
            f"  Successful: {summary['successful']:>6}",
            f"  Failed:     {summary['failed']:>6}",
            f"  Cost:       ${summary['total_cost']:>8.4f}",
            f"  Elapsed:    {summary['elapsed_seconds'] / 60:>6.1f} min",
            f"  Rate:       {summary['rate_per_minute']:>6.1f} items/min",
            f"  Remaining:  {summary['remaining_minutes']:>6.1f} min",
        ]
        return "\n".join(lines)

    def print_summary(self):
        """Print processing summary to console"""
        print("\n" + "=" * 60)
        print(self.format_progress())
        print("=" * 60)

        if self.errors:
            print("\nERRORS:")
            for error in self.errors[:10]:  # Show first 10 errors
                print(f"  - {error['item']}: {error['error']}")
            if len(self.errors) > 10:
                print(f"  ... and {len(self.errors) - 10} more errors")


def setup_console_logging(level: str = "INFO", color: bool = True,
                          fmt: str = DEFAULT_FORMAT):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level
        color: Whether to use colored output
        fmt: Log record format for the plain formatter
    """
    console_handler = logging.StreamHandler(sys.stdout)

    if color and sys.stdout.isatty():
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s%(asctime)s - %(name)s - %(levelname)s%(reset)s - %(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
    else:
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        if getattr(handler, '_sportfolio_console', False):
            root_logger.removeHandler(handler)
    console_handler._sportfolio_console = True
    root_logger.addHandler(console_handler)
