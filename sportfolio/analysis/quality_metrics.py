"""
Quality metrics analysis.

Compares the AI quality scores of story segments (comeback moments, peak
intensity, top sharpness) against the baseline of all enriched photos, to
show whether narrative filters also select for technical quality.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
from sqlalchemy.orm import Session

from ..db.models import PhotoMetadata

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ('sharpness', 'composition_score', 'emotional_impact', 'exposure_accuracy')
EXCELLENT_THRESHOLD = 9
TOP_SHARPNESS_THRESHOLD = 9.5
BASELINE_NAME = 'All enriched (baseline)'


@dataclass
class SegmentMetrics:
    name: str
    count: int
    avg_sharpness: float
    avg_composition: float
    avg_impact: float
    avg_exposure: float

    def deltas(self, baseline: 'SegmentMetrics') -> Dict[str, float]:
        return {
            'sharpness': self.avg_sharpness - baseline.avg_sharpness,
            'composition': self.avg_composition - baseline.avg_composition,
            'impact': self.avg_impact - baseline.avg_impact,
            'exposure': self.avg_exposure - baseline.avg_exposure,
        }


def _segment_filters() -> Dict[str, List[Any]]:
    enriched = PhotoMetadata.sharpness.isnot(None)
    return {
        'Comeback stories': [
            PhotoMetadata.emotion == 'triumph',
            PhotoMetadata.time_in_game == 'final_5_min',
            PhotoMetadata.emotional_impact >= 7,
            enriched,
        ],
        'Peak intensity': [
            PhotoMetadata.action_intensity == 'peak',
            PhotoMetadata.emotional_impact >= 8,
            PhotoMetadata.sharpness >= 7,
            enriched,
        ],
        BASELINE_NAME: [enriched],
        f'Top sharpness (>={TOP_SHARPNESS_THRESHOLD})': [
            PhotoMetadata.sharpness >= TOP_SHARPNESS_THRESHOLD,
            enriched,
        ],
    }


def _score_matrix(session: Session, criteria: List[Any]) -> np.ndarray:
    """Rows of the four metric columns; NULL becomes 0."""
    columns = [getattr(PhotoMetadata, c) for c in METRIC_COLUMNS]
    rows = session.query(*columns).filter(*criteria).all()
    if not rows:
        return np.zeros((0, len(METRIC_COLUMNS)))
    return np.array([[value or 0 for value in row] for row in rows], dtype=float)


def summarize_segment(name: str, scores: np.ndarray) -> SegmentMetrics:
    if scores.shape[0] == 0:
        means = np.zeros(len(METRIC_COLUMNS))
    else:
        means = scores.mean(axis=0)
    return SegmentMetrics(
        name=name,
        count=int(scores.shape[0]),
        avg_sharpness=float(means[0]),
        avg_composition=float(means[1]),
        avg_impact=float(means[2]),
        avg_exposure=float(means[3]),
    )


def excellence_distribution(scores: np.ndarray) -> Dict[str, Dict[str, Any]]:
    """Counts and percentages of photos scoring >= 9 per metric and on all three."""
    total = scores.shape[0] or 1
    if scores.shape[0] == 0:
        counts = {'sharpness': 0, 'composition': 0, 'impact': 0, 'triple': 0}
    else:
        excellent = scores[:, :3] >= EXCELLENT_THRESHOLD
        counts = {
            'sharpness': int(excellent[:, 0].sum()),
            'composition': int(excellent[:, 1].sum()),
            'impact': int(excellent[:, 2].sum()),
            'triple': int(excellent.all(axis=1).sum()),
        }
    return {name: {'count': count, 'percentage': round(count / total * 100, 1)}
            for name, count in counts.items()}


class QualityAnalyzer:
    """Segment comparison over photo_metadata."""

    def __init__(self, session: Session):
        self.session = session

    def segments(self) -> List[SegmentMetrics]:
        return [summarize_segment(name, _score_matrix(self.session, criteria))
                for name, criteria in _segment_filters().items()]

    def analyze(self) -> Dict[str, Any]:
        """
        Run the full comparison.

        Returns:
            Dict with segments, deltas vs baseline (per non-baseline segment),
            the excellence distribution and whether the story segments beat
            the baseline on both sharpness and impact
        """
        segments = self.segments()
        baseline = next(s for s in segments if s.name == BASELINE_NAME)
        others = [s for s in segments if s.name != BASELINE_NAME]

        story = others[:2]
        collections_better = all(
            s.avg_sharpness > baseline.avg_sharpness and s.avg_impact > baseline.avg_impact
            for s in story
        )

        distribution = excellence_distribution(
            _score_matrix(self.session, [PhotoMetadata.sharpness.isnot(None)]))

        logger.info(f"Quality analysis: {baseline.count} enriched photos, "
                    f"{distribution['triple']['count']} triple-excellent")

        return {
            'segments': segments,
            'baseline': baseline,
            'deltas': {s.name: s.deltas(baseline) for s in others},
            'distribution': distribution,
            'collections_better': collections_better,
        }


def format_delta(delta: Optional[float]) -> str:
    delta = delta or 0.0
    sign = '+' if delta >= 0 else ''
    return f"{sign}{delta:.1f}".rjust(6)
