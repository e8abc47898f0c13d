"""
Tests for photo metadata operations.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from sportfolio.db.models import PhotoMetadata
from sportfolio.db.operations import PhotoOperations, months_ago


class TestMonthsAgo:
    """Calendar month arithmetic."""

    def test_simple(self):
        assert months_ago(24, datetime(2025, 10, 15, 12, 0)) == datetime(2023, 10, 15, 12, 0)

    def test_crosses_year(self):
        assert months_ago(3, datetime(2025, 2, 10)) == datetime(2024, 11, 10)

    def test_clamps_to_month_end(self):
        assert months_ago(1, datetime(2025, 3, 31)) == datetime(2025, 2, 28)
        assert months_ago(1, datetime(2024, 3, 31)) == datetime(2024, 2, 29)


class TestUpsert:
    """Inserts and partial updates."""

    def test_insert_then_update(self, session):
        ops = PhotoOperations(session)
        ops.upsert_photo({'photo_id': 'p1', 'image_key': 'k1', 'image_url': 'https://x/1.jpg',
                          'keywords': ['volleyball'], 'not_a_column': 1})
        ops.upsert_photo({'photo_id': 'p1', 'album_name': 'Finals'})
        session.commit()

        photo = ops.get_photo('p1')
        assert photo.album_name == 'Finals'
        assert photo.keywords == ['volleyball']
        assert photo.image_url == 'https://x/1.jpg'

    def test_score_range_is_enforced(self, session):
        session.add(PhotoMetadata(photo_id='p1', image_key='k1', image_url='u', sharpness=11))
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()


class TestEnrichmentQueries:
    """Candidate selection and write-back."""

    def test_candidates_per_job(self, session, make_photo):
        now = datetime.utcnow()
        make_photo(photo_date=now - timedelta(days=1))
        make_photo(photo_date=now - timedelta(days=2), lighting='soft', enriched_at=now)
        make_photo(photo_date=now - timedelta(days=3), photo_category='action', album_key='a1')
        ops = PhotoOperations(session)

        assert [p.photo_id for p in ops.get_enrichment_candidates('schema_v2')] == ['p0001', 'p0003']
        assert ops.count_enrichment_candidates('schema_v2', album_key='a1') == 1
        assert [p.photo_id for p in ops.get_enrichment_candidates('play_types')] == ['p0003']
        assert ops.count_enrichment_candidates('full') == 2
        assert len(ops.get_enrichment_candidates('schema_v2', limit=1)) == 1

    def test_unknown_job(self, session):
        with pytest.raises(ValueError):
            PhotoOperations(session).count_enrichment_candidates('bogus')

    def test_apply_enrichment(self, session, make_photo):
        make_photo()
        ops = PhotoOperations(session)

        assert ops.apply_enrichment('p0001', {'lighting': 'dramatic', 'emotion': None,
                                              'photo_id': 'hijack'},
                                    provider='claude', cost=0.0002)
        photo = ops.get_photo('p0001')
        assert photo.lighting == 'dramatic'
        assert photo.ai_provider == 'claude'
        assert photo.ai_cost == 0.0002
        assert photo.enriched_at is not None
        assert not ops.apply_enrichment('missing', {'lighting': 'soft'})

    def test_backfill_status(self, session, make_photo):
        now = datetime.utcnow()
        make_photo(photo_date=now, lighting='soft')
        make_photo(photo_date=now)
        make_photo(photo_date=now - timedelta(days=4 * 365), lighting='soft')

        assert PhotoOperations(session).backfill_status(24) == {
            'total': 2, 'enriched': 1, 'remaining': 1}
        assert PhotoOperations(session).backfill_status(None) == {
            'total': 3, 'enriched': 2, 'remaining': 1}


class TestSearch:
    """Filtered search and related photos."""

    @pytest.fixture
    def photos(self, make_photo):
        make_photo(sport_type='volleyball', play_type='block', lighting='dramatic',
                   photo_date=datetime(2025, 5, 1), album_key='a1', emotional_impact=8)
        make_photo(sport_type='volleyball', play_type='block', lighting='backlit',
                   photo_date=datetime(2025, 5, 2), album_key='a1', emotional_impact=9)
        make_photo(sport_type='volleyball', play_type='dig', lighting='dramatic',
                   photo_date=datetime(2025, 5, 3), album_key='a2')
        make_photo(sport_type='basketball', play_type='block',
                   photo_date=datetime(2025, 5, 4), album_key='a3')

    def test_filters_and_sort(self, session, photos):
        found, total = PhotoOperations(session).search({'sport': 'volleyball', 'play_type': 'block'})
        assert total == 2
        assert [p.photo_id for p in found] == ['p0002', 'p0001']

    def test_lighting_list(self, session, photos):
        found, total = PhotoOperations(session).search({'lighting': ['dramatic', 'backlit']})
        assert total == 3

    def test_unknown_filters_and_empty_values_ignored(self, session, photos):
        _, total = PhotoOperations(session).search({'bogus': 'x', 'lighting': [], 'category': None})
        assert total == 4

    def test_pagination(self, session, photos):
        found, total = PhotoOperations(session).search({}, limit=2, offset=2, sort='not_a_column')
        assert total == 4
        assert [p.photo_id for p in found] == ['p0002', 'p0001']

    def test_related_photos(self, session, photos, make_photo):
        make_photo(sport_type='volleyball', play_type='block', album_key='a9')

        related = PhotoOperations(session).related_photos('p0001')

        assert [p.photo_id for p in related] == ['p0002', 'p0005']
        assert PhotoOperations(session).related_photos('missing') == []


class TestStatistics:
    """Distributions, coverage and filter options."""

    def test_distribution(self, session, make_photo):
        make_photo(sport_type='volleyball')
        make_photo(sport_type='volleyball')
        make_photo(sport_type='soccer')
        make_photo()

        rows = PhotoOperations(session).distribution('sport_type')

        assert rows == [
            {'name': 'volleyball', 'count': 2, 'percentage': 50.0},
            {'name': 'soccer', 'count': 1, 'percentage': 25.0},
        ]

    def test_distribution_unknown_column(self, session):
        with pytest.raises(ValueError):
            PhotoOperations(session).distribution('nope')

    def test_coverage_report(self, session, make_photo):
        make_photo(lighting='soft', sharpness=8, composition_score=7, exposure_accuracy=7,
                   emotional_impact=6, ai_cost=0.0001)
        make_photo(lighting='soft', ai_cost=0.0002)

        report = PhotoOperations(session).coverage_report()

        assert report['total'] == 2
        assert report['fields']['lighting'] == {'count': 2, 'percentage': 100.0}
        assert report['fields']['sharpness'] == {'count': 1, 'percentage': 50.0}
        assert report['fully_scored'] == 1
        assert report['total_cost'] == pytest.approx(0.0003)

    def test_filter_options(self, session, make_photo):
        make_photo(sport_type='volleyball', lighting='soft')
        make_photo(sport_type='basketball', lighting='soft')

        options = PhotoOperations(session).filter_options()

        assert options['sport_type'] == ['basketball', 'volleyball']
        assert options['lighting'] == ['soft']
        assert options['composition'] == []
