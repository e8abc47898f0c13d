"""
Tests for album summaries and album name sync.
"""

import importlib.util
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from sportfolio.db.album_utils import AlbumManager
from sportfolio.db.models import PhotoMetadata


class FakeCache:
    def __init__(self):
        self.store = {}
        self.loads = 0

    def get_or_load(self, prefix, identifier, loader, ttl=None, params=None):
        key = (prefix, identifier)
        if key not in self.store:
            self.loads += 1
            self.store[key] = loader()
        return self.store[key]


@pytest.fixture
def albums(make_photo):
    make_photo(album_key='a1', album_name='Eagles vs Hawks', sport_type='volleyball',
               photo_date=datetime(2025, 5, 30), emotional_impact=6)
    make_photo(album_key='a1', album_name='Eagles vs Hawks', sport_type='volleyball',
               photo_date=datetime(2025, 5, 31), emotional_impact=9,
               thumbnail_url='https://photos.example.com/2/thumb.jpg')
    make_photo(album_key='a1', album_name='Eagles vs Hawks', sport_type='basketball',
               photo_date=datetime(2025, 5, 30))
    make_photo(album_key='a2', album_name='Fall Classic', sport_type='soccer',
               photo_date=datetime(2024, 9, 1))
    make_photo(album_key='a2', album_name='Fall Classic', sport_type='basketball',
               photo_date=datetime(2024, 9, 2))
    make_photo()


class TestAlbumsSummary:
    """Aggregates per album."""

    def test_summary_rows(self, session, albums):
        rows = AlbumManager(session).albums_summary()

        assert [r['album_key'] for r in rows] == ['a1', 'a2']
        a1, a2 = rows
        assert a1['photo_count'] == 3
        assert a1['primary_sport'] == 'volleyball'
        assert a1['earliest_date'] == datetime(2025, 5, 30)
        assert a1['latest_date'] == datetime(2025, 5, 31)
        assert a1['cover_photo_id'] == 'p0002'
        assert a1['cover_image_url'] == 'https://photos.example.com/2/thumb.jpg'
        # tie broken alphabetically
        assert a2['primary_sport'] == 'basketball'

    def test_summary_is_cached(self, session, albums):
        cache = FakeCache()
        manager = AlbumManager(session, cache=cache)

        manager.albums_summary()
        manager.albums_summary()

        assert cache.loads == 1

    def test_get_album_and_keys(self, session, albums):
        manager = AlbumManager(session)
        assert manager.get_album('a2')['photo_count'] == 2
        assert manager.get_album('missing') is None
        assert manager.get_all_album_keys() == ['a1', 'a2']
        assert [p.photo_id for p in manager.get_album_photos('a1', limit=2)] == ['p0001', 'p0003']

    def test_by_primary_sport(self, session, albums):
        rows = AlbumManager(session).albums_by_primary_sport('volleyball')
        assert [r['album_key'] for r in rows] == ['a1']

    def test_cover_and_name_ties(self, session, make_photo):
        make_photo(album_key='a1', album_name='Later Name', photo_date=datetime(2025, 6, 2),
                   emotional_impact=7)
        make_photo(album_key='a1', album_name='First Name', photo_date=datetime(2025, 6, 1),
                   emotional_impact=7)
        make_photo(album_key='a1', photo_date=datetime(2025, 6, 2), emotional_impact=7)
        make_photo(album_key='a1', emotional_impact=7)

        row = AlbumManager(session).albums_summary()[0]

        # all photos count, scored or not
        assert row['photo_count'] == 4
        assert row['album_name'] == 'First Name'
        # same impact: newest wins, then the lowest photo_id
        assert row['cover_photo_id'] == 'p0001'
        assert row['enriched_count'] == 0


class TestAlbumSync:
    """album_name sync and verification."""

    def test_sync_and_verify(self, session, albums):
        manager = AlbumManager(session)

        assert manager.verify_album_sync('a1', 'Eagles vs Hawks - May 2025')['synced'] is False

        updated, errors = manager.sync_album_name('a1', 'Eagles vs Hawks - May 2025')
        session.commit()

        assert (updated, errors) == (3, [])
        result = manager.verify_album_sync('a1', 'Eagles vs Hawks - May 2025')
        assert result == {'synced': True, 'photo_count': 3, 'issues': []}

    def test_verify_reports_stale_photos(self, session, albums):
        result = AlbumManager(session).verify_album_sync('a1', 'Renamed')
        assert result['synced'] is False
        assert result['issues'][0] == '3/3 photos have stale album names'

    def test_verify_missing_album(self, session):
        result = AlbumManager(session).verify_album_sync('nope', 'x')
        assert result['photo_count'] == 0
        assert result['issues'] == ['No photos found for album_key: nope']

    def test_batch_sync(self, session, albums):
        results = AlbumManager(session).batch_sync_albums([('a1', 'One'), ('a2', 'Two')])
        session.commit()

        assert results == {'success': 2, 'failed': 0, 'errors': []}
        names = {p.album_key: p.album_name for p in session.query(PhotoMetadata)
                 .filter(PhotoMetadata.album_key.isnot(None))}
        assert names == {'a1': 'One', 'a2': 'Two'}

    def test_sync_commits_each_album(self, session, session_scope, albums):
        with pytest.raises(RuntimeError):
            with session_scope() as s:
                AlbumManager(s).sync_album_name('a1', 'Committed')
                raise RuntimeError('run aborted')

        with session_scope() as s:
            assert AlbumManager(s).verify_album_sync('a1', 'Committed')['synced'] is True

    def test_failed_sync_keeps_earlier_albums(self, session, session_scope, albums):
        with session_scope() as s:
            manager = AlbumManager(s)
            manager.sync_album_name('a1', 'One')
            # out-of-range score fails the next flush
            s.add(PhotoMetadata(photo_id='bad', image_key='bad', image_url='u', sharpness=11))
            updated, errors = manager.sync_album_name('a2', 'Two')

        assert updated == 0
        assert errors
        with session_scope() as s:
            manager = AlbumManager(s)
            assert manager.verify_album_sync('a1', 'One')['synced'] is True
            assert manager.verify_album_sync('a2', 'Fall Classic')['synced'] is True
            assert s.get(PhotoMetadata, 'bad') is None

    def test_sync_stats(self, session, albums):
        photo = session.get(PhotoMetadata, 'p0001')
        photo.enriched_at = datetime.utcnow() - timedelta(hours=1)
        session.commit()

        stats = AlbumManager(session).sync_stats()

        assert stats == {
            'total_albums': 2,
            'total_photos': 6,
            'photos_with_album_key': 5,
            'photos_without_album_key': 1,
            'recently_enriched': 1,
        }


def _load_migration(name):
    path = Path(__file__).resolve().parent.parent / 'alembic' / 'versions' / name
    spec = importlib.util.spec_from_file_location(name[:-3], path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestAlbumsSummaryView:
    """The Postgres view follows the Python summary rules."""

    @pytest.fixture(scope='class')
    def sql(self):
        return _load_migration('004_albums_summary_view.py').ALBUMS_SUMMARY_SQL

    def test_counts_every_album_photo(self, sql):
        assert 'sharpness IS NOT NULL' not in sql
        assert 'WHERE p.album_key IS NOT NULL\n' in sql

    def test_primary_sport_breaks_ties_alphabetically(self, sql):
        assert 'MODE()' not in sql
        assert 'ORDER BY COUNT(*) DESC, s.sport_type ASC' in sql

    def test_cover_by_emotional_impact_then_newest(self, sql):
        assert 'AS cover_photo_id' in sql
        assert 'AS enriched_count' in sql
        assert sql.count('ORDER BY COALESCE(p.emotional_impact, -1) DESC') == 2
        assert 'upload_date DESC' not in sql
