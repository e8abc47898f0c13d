"""
Enrichment quality analysis.
"""

from .quality_metrics import (
    SegmentMetrics, QualityAnalyzer, summarize_segment, excellence_distribution, format_delta,
)

__all__ = [
    'SegmentMetrics',
    'QualityAnalyzer',
    'summarize_segment',
    'excellence_distribution',
    'format_delta',
]
