"""
Tests for batch statistics and structured log messages.
"""

import json

import pytest

from sportfolio.utils.logging import BatchStats, StructuredLogger


class TestBatchStats:
    """Counters and summaries."""

    def test_counts_and_cost(self):
        stats = BatchStats(total=4, label='Schema v2 backfill')
        stats.add_success(0.000128)
        stats.add_success(0.000128)
        stats.add_failure('p3', 'timeout')
        stats.add_skip()

        summary = stats.get_summary()
        assert summary['processed'] == 4
        assert summary['successful'] == 2
        assert summary['failed'] == 1
        assert summary['skipped'] == 1
        assert summary['total_cost'] == pytest.approx(0.000256)
        assert summary['errors'] == 1
        assert stats.errors[0]['item'] == 'p3'
        assert stats.get_progress_percentage() == 100.0

    def test_empty_batch(self):
        stats = BatchStats()
        assert stats.get_progress_percentage() == 0.0
        assert 'Processed:       0/0 (0.0%)' in stats.format_progress()


class TestStructuredLogger:
    """Metadata appended as JSON."""

    def test_format_message(self):
        log = StructuredLogger('sportfolio.test', {'job': 'schema_v2'})
        message = log._format_message('Batch done', batch=3)

        text, payload = message.split(' | ')
        assert text == 'Batch done'
        assert json.loads(payload) == {'job': 'schema_v2', 'batch': 3}

    def test_plain_message(self):
        assert StructuredLogger('sportfolio.test')._format_message('hello') == 'hello'
