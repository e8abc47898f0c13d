"""
Tests for volleyball misclassification detection and repair.
"""

from sportfolio.db.album_utils import AlbumManager
from sportfolio.db.models import PhotoMetadata
from sportfolio.taxonomy.misclassification import (
    find_misclassifications, fix_misclassifications, group_by_reason,
)


def _album(key, name, sport='volleyball', count=10):
    return {'album_key': key, 'album_name': name, 'primary_sport': sport, 'photo_count': count}


class TestFindMisclassifications:
    """Pattern matching on album summaries."""

    def test_matches_known_patterns(self):
        albums = [
            _album('a1', 'Varsity Basketball vs Central'),
            _album('a2', 'Class of 2024 Graduation'),
            _album('a3', 'Bruno at the park'),
            _album('a4', 'Eagles vs Hawks'),
        ]

        found = {item.album_key: item for item in find_misclassifications(albums)}

        assert set(found) == {'a1', 'a2', 'a3'}
        assert found['a1'].suggested_sport == 'basketball'
        assert found['a2'].suggested_sport == 'portrait'
        assert found['a3'].suggested_sport == 'other'
        assert found['a3'].reason == 'Dogs/Pets incorrectly marked as volleyball'

    def test_only_volleyball_albums_are_checked(self):
        assert find_misclassifications([_album('a1', 'Basketball Finals', sport='basketball')]) == []

    def test_first_pattern_wins(self):
        found = find_misclassifications([_album('a1', 'Basketball Birthday Party')])
        assert len(found) == 1
        assert found[0].suggested_sport == 'basketball'

    def test_word_boundary_for_golf(self):
        assert find_misclassifications([_album('a1', 'Golfers Classic')]) == []
        assert find_misclassifications([_album('a1', 'Spring Golf Outing')])[0].suggested_sport == 'other'

    def test_group_by_reason(self):
        found = find_misclassifications([
            _album('a1', 'Tennis Regionals'),
            _album('a2', 'Tennis Finals'),
            _album('a3', 'Homecoming Dance'),
        ])
        grouped = group_by_reason(found)
        assert len(grouped['Tennis incorrectly marked as volleyball']) == 2
        assert len(grouped['Homecoming events incorrectly marked as volleyball']) == 1


class TestFixMisclassifications:
    """Writing the suggested sport back."""

    def test_fix_updates_every_photo_of_the_album(self, session, make_photo):
        for _ in range(3):
            make_photo(album_key='bb1', album_name='JV Basketball', sport_type='volleyball')
        make_photo(album_key='vb1', album_name='Eagles vs Hawks', sport_type='volleyball')

        found = find_misclassifications(AlbumManager(session).albums_summary())
        results = fix_misclassifications(session, found)

        assert results == {'fixed': 1, 'errors': 0, 'photos_updated': 3}
        sports = {p.album_key: p.sport_type for p in session.query(PhotoMetadata).all()}
        assert sports == {'bb1': 'basketball', 'vb1': 'volleyball'}
