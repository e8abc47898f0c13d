"""
Tests for sport taxonomy inference.
"""

from types import SimpleNamespace

import pytest

from sportfolio.db.models import PhotoMetadata
from sportfolio.taxonomy.inference import (
    TaxonomyInferencer, infer_action_type, infer_photo_category, infer_sport_type,
)


def photo(**fields):
    defaults = dict(play_type=None, keywords=None, album_name=None, action_intensity=None,
                    emotion=None, title=None, sport_type=None, photo_category=None)
    defaults.update(fields)
    return SimpleNamespace(**defaults)


class TestSportRules:
    """Priority order of the sport rules."""

    def test_volleyball_play_type_wins(self):
        assert infer_sport_type(photo(play_type='dig', keywords=['basketball'])) == (
            'volleyball', 'sport_from_play_type')

    def test_keywords(self):
        assert infer_sport_type(photo(keywords=['Basketball', 'hoops'])) == (
            'basketball', 'sport_from_keywords')
        assert infer_sport_type(photo(keywords=['football'])) == ('soccer', 'sport_from_keywords')
        assert infer_sport_type(photo(keywords=['senior'])) == ('portrait', 'sport_from_keywords')

    def test_album_name(self):
        assert infer_sport_type(photo(album_name='Varsity Soccer vs Central')) == (
            'soccer', 'sport_from_album_name')

    def test_default(self):
        assert infer_sport_type(photo()) == ('volleyball', 'sport_default')


class TestCategoryRules:
    """photo_category inference."""

    @pytest.mark.parametrize('fields,expected', [
        ({'action_intensity': 'peak', 'play_type': 'block'}, 'action'),
        ({'play_type': 'celebration'}, 'celebration'),
        ({'emotion': 'triumph'}, 'celebration'),
        ({'action_intensity': 'low'}, 'candid'),
        ({'play_type': 'timeout'}, 'candid'),
        ({'keywords': ['headshot']}, 'portrait'),
        ({'title': 'Pregame warmup'}, 'warmup'),
        ({'album_name': 'Warmup session'}, 'warmup'),
        ({'action_intensity': 'medium'}, 'action'),
        ({}, 'candid'),
    ])
    def test_category(self, fields, expected):
        assert infer_photo_category(photo(**fields)) == expected


class TestActionType:
    """action_type inference."""

    def test_volleyball_keeps_play_type(self):
        assert infer_action_type(photo(sport_type='volleyball', play_type='set',
                                       photo_category='candid')) == 'set'

    def test_non_action_categories_get_none(self):
        assert infer_action_type(photo(sport_type='basketball', play_type='dunk',
                                       photo_category='portrait')) is None

    def test_other_sports(self):
        assert infer_action_type(photo(sport_type='basketball', play_type='dunk',
                                       photo_category='action')) == 'dunk'


class TestTaxonomyInferencer:
    """Database pass."""

    def test_run_fills_nulls_and_counts(self, session, make_photo):
        make_photo(play_type='block', action_intensity='peak')
        make_photo(keywords=['basketball'], action_intensity='low')
        make_photo(album_name='Track Invitational')
        make_photo(sport_type='soccer', photo_category='action', action_type='kick')

        counts = TaxonomyInferencer(session).run()
        session.commit()

        assert counts['sport_from_play_type'] == 1
        assert counts['sport_from_keywords'] == 1
        assert counts['sport_from_album_name'] == 1
        assert counts['sport_default'] == 0
        assert counts['photo_category'] == 3
        assert counts['action_type'] == 1

        by_id = {p.photo_id: p for p in session.query(PhotoMetadata).all()}
        assert by_id['p0001'].sport_type == 'volleyball'
        assert by_id['p0001'].photo_category == 'action'
        assert by_id['p0001'].action_type == 'block'
        assert by_id['p0002'].sport_type == 'basketball'
        assert by_id['p0002'].photo_category == 'candid'
        assert by_id['p0003'].sport_type == 'track'
        assert by_id['p0004'].action_type == 'kick'

    def test_rerun_is_noop(self, session, make_photo):
        make_photo(play_type='serve')
        inferencer = TaxonomyInferencer(session)
        inferencer.run()
        session.commit()

        assert sum(inferencer.run().values()) == 0

    def test_dry_run_rolls_back(self, session, make_photo):
        make_photo(keywords=['baseball'])

        counts = TaxonomyInferencer(session).run(dry_run=True)

        assert counts['sport_from_keywords'] == 1
        assert session.get(PhotoMetadata, 'p0001').sport_type is None

    def test_coverage(self, session, make_photo):
        make_photo(sport_type='volleyball')
        make_photo()

        coverage = TaxonomyInferencer(session).coverage()

        assert coverage == {'total': 2, 'sport_type': 1, 'photo_category': 0, 'action_type': 0}
