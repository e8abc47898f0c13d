"""
Tests for segment quality comparison.
"""

import numpy as np
import pytest

from sportfolio.analysis.quality_metrics import (
    BASELINE_NAME, QualityAnalyzer, excellence_distribution, format_delta,
)


@pytest.fixture
def enriched(make_photo):
    make_photo(sharpness=10, composition_score=9, emotional_impact=9, exposure_accuracy=8,
               emotion='triumph', time_in_game='final_5_min', action_intensity='peak')
    make_photo(sharpness=6, composition_score=6, emotional_impact=5, exposure_accuracy=6)
    make_photo(sharpness=8, composition_score=9, emotional_impact=7, exposure_accuracy=7)
    make_photo(emotional_impact=10)


class TestQualityAnalyzer:
    """Segments against the enriched baseline."""

    def test_segments(self, session, enriched):
        segments = QualityAnalyzer(session).segments()

        assert [s.name for s in segments] == [
            'Comeback stories', 'Peak intensity', BASELINE_NAME, 'Top sharpness (>=9.5)']
        baseline = segments[2]
        assert baseline.count == 3
        assert baseline.avg_sharpness == pytest.approx(8.0)
        assert baseline.avg_impact == pytest.approx(7.0)
        assert segments[0].count == 1

    def test_analyze(self, session, enriched):
        report = QualityAnalyzer(session).analyze()

        assert report['collections_better'] is True
        deltas = report['deltas']['Comeback stories']
        assert deltas['sharpness'] == pytest.approx(2.0)
        assert deltas['composition'] == pytest.approx(1.0)
        assert deltas['impact'] == pytest.approx(2.0)
        assert deltas['exposure'] == pytest.approx(1.0)
        assert BASELINE_NAME not in report['deltas']

        distribution = report['distribution']
        assert distribution['sharpness'] == {'count': 1, 'percentage': 33.3}
        assert distribution['composition'] == {'count': 2, 'percentage': 66.7}
        assert distribution['triple'] == {'count': 1, 'percentage': 33.3}

    def test_empty_database(self, session):
        report = QualityAnalyzer(session).analyze()

        assert report['baseline'].count == 0
        assert report['collections_better'] is False
        assert report['distribution']['triple'] == {'count': 0, 'percentage': 0.0}


class TestHelpers:
    """Distribution and formatting helpers."""

    def test_distribution_null_scores_are_zero(self):
        scores = np.array([[9.0, 9.0, 0.0, 0.0], [9.5, 9.0, 9.0, 0.0]])
        distribution = excellence_distribution(scores)
        assert distribution['impact']['count'] == 1
        assert distribution['triple'] == {'count': 1, 'percentage': 50.0}

    def test_format_delta(self):
        assert format_delta(2.0) == '  +2.0'
        assert format_delta(-0.5) == '  -0.5'
        assert format_delta(None) == '  +0.0'
