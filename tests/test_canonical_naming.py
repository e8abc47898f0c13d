"""
Tests for canonical album naming and drift scoring.
"""

import pytest

from sportfolio.naming.canonical import (
    MAX_LENGTH_HARD,
    AlbumEnrichment, AlbumNameInput, AlbumPhoto, SmugMugAlbumData, Teams,
    calculate_drift_score, clean_event_name, clean_team_name, extract_date_range,
    format_canonical_date, from_smugmug_album, generate_canonical_name,
    generate_canonical_name_from_smugmug, infer_date_from_name, levenshtein_distance,
    normalize_exif_date, parse_existing_name, truncate_if_needed, validate_canonical_name,
)


def _exif_photo(timestamp):
    return AlbumPhoto(exif={'DateTimeOriginal': timestamp})


class TestCleaning:
    """Team and event name cleanup."""

    def test_team_level_prefix_and_sport_suffix(self):
        assert clean_team_name("HS Eagles Volleyball") == "Eagles"
        assert clean_team_name("Men's Lakers") == "Lakers"
        assert clean_team_name("  Hawks ") == "Hawks"

    def test_event_abbreviations_and_year(self):
        assert clean_event_name("2024 State Championship") == "State Champ"
        assert clean_event_name("Summer Invitational Tournament 2024") == "Summer Invite Tourney"

    def test_event_trailing_photos(self):
        assert clean_event_name("Senior Night Photos") == "Senior Night"

    def test_parse_matchup(self):
        parsed = parse_existing_name("HS VB - Eagles vs Hawks 2024")
        assert parsed == {'teams': Teams(home='Eagles', away='Hawks')}

    def test_parse_event(self):
        assert parse_existing_name("Fall Classic 2023") == {'event': 'Fall Classic'}

    def test_parse_nothing_recognizable(self):
        assert parse_existing_name("VB") == {}


class TestDates:
    """EXIF normalization, inference and formatting."""

    def test_normalize_exif_date(self):
        assert normalize_exif_date('2025:05:30 18:15:23') == '2025-05-30'
        assert normalize_exif_date('2025-05-30T18:15:23') == '2025-05-30'
        assert normalize_exif_date('garbage') is None
        assert normalize_exif_date(None) is None

    def test_infer_date_from_name(self):
        assert infer_date_from_name('Regionals 2024-03-15') == '2024-03-15'
        assert infer_date_from_name('Finals 03-15-2024') == '2024-03-15'
        assert infer_date_from_name('Fall 2023') == '2023-01-01'
        assert infer_date_from_name('Nothing here') is None

    def test_single_day_format(self):
        assert format_canonical_date('2025-05-30', '2025-05-30') == 'May 30'

    def test_multi_day_format(self):
        assert format_canonical_date('2024-05-01', '2024-05-31') == 'May 2024'

    def test_missing_or_malformed_date(self):
        assert format_canonical_date(None, None) == ''
        assert format_canonical_date('2024-13-01', '2024-13-01') == ''
        assert format_canonical_date('bad', 'bad') == ''

    def test_date_range_prefers_exif(self):
        album = SmugMugAlbumData(
            album_key='a1', name='Some Album 2020',
            date_start='2024-06-01',
            photos=[_exif_photo('2024:05:02 10:00:00'), _exif_photo('2024:05:01 09:00:00'),
                    AlbumPhoto(exif={'DateTimeOriginal': 'not a date'})],
        )
        assert extract_date_range(album) == ('2024-05-01', '2024-05-02', 'exif')

    def test_date_range_from_album_fields(self):
        album = SmugMugAlbumData(album_key='a1', name='x', date_start='2024-06-01T00:00:00')
        assert extract_date_range(album) == ('2024-06-01', '2024-06-01', 'album_field')

    def test_date_range_inferred_then_fallback(self):
        assert extract_date_range(SmugMugAlbumData('a1', 'Regionals 2024-03-15')) == (
            '2024-03-15', '2024-03-15', 'inferred')
        assert extract_date_range(SmugMugAlbumData('a1', 'Regionals')) == (
            None, None, 'fallback')


class TestDriftScore:
    """Drift heuristics."""

    def test_levenshtein(self):
        assert levenshtein_distance('kitten', 'sitting') == 3
        assert levenshtein_distance('', 'abc') == 3
        assert levenshtein_distance('same', 'same') == 0

    def test_identical_names_score_zero(self):
        assert calculate_drift_score('Eagles vs Hawks', '  eagles vs hawks ') == (0, [])

    def test_prefix_and_iso_date_changes(self):
        score, changes = calculate_drift_score('HS VB Eagles vs Hawks 2025-05-30',
                                               'Eagles vs Hawks - May 30')
        assert 0 < score <= 100
        assert 'Removed sport/level prefix' in changes
        assert 'Date format changed from ISO to readable' in changes
        assert 'Matchup structure preserved' in changes

    def test_score_is_clamped(self):
        score, _ = calculate_drift_score('a', 'completely different and much longer text')
        assert 0 <= score <= 100


class TestTruncation:
    """Length limits."""

    def test_short_name_untouched(self):
        assert truncate_if_needed('Eagles vs Hawks - May 30') == ('Eagles vs Hawks - May 30', False)

    def test_keeps_date_part(self):
        name, truncated = truncate_if_needed('A' * 50 + ' - May 30')
        assert truncated
        assert name.endswith('... - May 30')
        assert len(name) == MAX_LENGTH_HARD

    def test_hard_truncate_without_separator(self):
        name, truncated = truncate_if_needed('B' * 60)
        assert truncated
        assert name == 'B' * 42 + '...'


class TestSmugMugNaming:
    """Canonical names from SmugMug album data."""

    def test_enrichment_teams_and_exif_date(self):
        album = SmugMugAlbumData(
            album_key='abc123',
            name='HS VB Eagles vs Hawks 2025-05-30',
            photos=[_exif_photo('2025:05:30 18:15:23'), _exif_photo('2025:05:30 19:02:11')],
            enrichment=AlbumEnrichment(sport_type='volleyball',
                                       teams=Teams('HS Eagles', 'Hawks Volleyball')),
        )
        result = generate_canonical_name_from_smugmug(album)

        assert result.name == 'Eagles vs Hawks - May 30'
        assert result.length == len(result.name)
        assert not result.truncated
        assert result.components == {'event': 'Eagles vs Hawks', 'date': 'May 30'}
        assert result.metadata == {
            'is_matchup': True,
            'is_multi_day': False,
            'date_source': 'exif',
            'confidence': 'high',
        }
        assert result.drift_score > 0
        assert result.drift_analysis['existing_name'] == album.name

    def test_enrichment_event_multi_day(self):
        album = SmugMugAlbumData(
            album_key='k', name='Old name',
            photos=[_exif_photo('2024:05:01 08:00:00'), _exif_photo('2024:05:03 17:00:00')],
            enrichment=AlbumEnrichment(event_name='2024 Summer Invitational'),
        )
        result = generate_canonical_name_from_smugmug(album)
        assert result.name == 'Summer Invite - May 2024'
        assert result.metadata['is_multi_day'] is True
        assert result.metadata['confidence'] == 'high'

    def test_parsed_name_without_dates(self):
        result = generate_canonical_name_from_smugmug(
            SmugMugAlbumData(album_key='k', name='Spring Invitational'))
        assert result.name == 'Spring Invite'
        assert result.metadata['date_source'] == 'fallback'
        assert result.metadata['confidence'] == 'medium'
        assert result.components['date'] == ''

    def test_nothing_usable_gives_low_confidence(self):
        result = generate_canonical_name_from_smugmug(SmugMugAlbumData(album_key='k', name='VB'))
        assert result.name == ''
        assert result.metadata['confidence'] == 'low'

    def test_album_field_dates_raise_confidence(self):
        result = generate_canonical_name_from_smugmug(
            SmugMugAlbumData(album_key='k', name='VB', date_start='2024-09-12'))
        assert result.name == 'Sep 12'
        assert result.metadata['confidence'] == 'medium'
        assert result.metadata['date_source'] == 'album_field'

    def test_output_never_exceeds_hard_limit(self):
        album = SmugMugAlbumData(
            album_key='k', name='x',
            photos=[_exif_photo('2024:05:01 08:00:00')],
            enrichment=AlbumEnrichment(event_name='Extraordinarily Long Regional Qualifier Showcase Weekend'),
        )
        result = generate_canonical_name_from_smugmug(album)
        assert result.length <= MAX_LENGTH_HARD
        assert result.truncated

    def test_from_dict(self):
        album = SmugMugAlbumData.from_dict({
            'albumKey': 'xyz',
            'name': 'Eagles vs Hawks',
            'dateStart': '2024-05-01',
            'photos': [{'exif': {'DateTimeOriginal': '2024:05:01 10:00:00'}, 'caption': 'Kill'}],
            'enrichment': {'sportType': 'volleyball', 'teams': {'home': 'Eagles', 'away': 'Hawks'}},
        })
        assert album.album_key == 'xyz'
        assert album.photos[0].caption == 'Kill'
        assert album.photos[0].keywords == []
        assert album.enrichment.teams == Teams('Eagles', 'Hawks')
        assert album.enrichment.event_name is None


class TestLegacyNaming:
    """The input-based path used for manual naming."""

    def test_teams_and_range(self):
        result = generate_canonical_name(AlbumNameInput(
            teams=Teams('Eagles', 'Hawks'),
            earliest_photo_date='2024-05-01', latest_photo_date='2024-05-03'))
        assert result.name == 'Eagles vs Hawks - May 2024'
        assert result.metadata['is_multi_day'] is True
        assert result.metadata['date_source'] == 'fallback'
        assert result.drift_score is None

    def test_from_smugmug_album(self):
        result = from_smugmug_album('Eagles vs Hawks', ['volleyball'], '2024-05-01', '2024-05-01')
        assert result.name == 'Eagles vs Hawks - May 1'
        assert result.metadata['is_matchup'] is True


class TestValidation:
    """Naming rule checks."""

    def test_valid_name(self):
        result = validate_canonical_name('Eagles vs Hawks - May 30')
        assert result == {'valid': True, 'warnings': [], 'errors': []}

    def test_invalid_name(self):
        result = validate_canonical_name('HS VB Eagles  vs Hawks 2024-05-30')
        assert result['valid'] is False
        assert 'Name contains double spaces' in result['errors']
        assert any('ISO date' in w for w in result['warnings'])
        assert any('HS VB' in w for w in result['warnings'])

    @pytest.mark.parametrize('length,valid', [(35, True), (45, True), (46, False)])
    def test_length_limits(self, length, valid):
        assert validate_canonical_name('x' * length)['valid'] is valid
