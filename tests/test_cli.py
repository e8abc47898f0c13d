"""
Tests for the sportfolio command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from cli import main


@pytest.fixture
def run(cli_config):
    runner = CliRunner()

    def invoke(*args, input=None):
        return runner.invoke(main, list(args), obj={'config': cli_config}, input=input)

    return invoke


class TestBasics:
    """Commands that need no database."""

    def test_version(self, run):
        result = run('version')
        assert result.exit_code == 0
        assert 'Sportfolio v0.1.0' in result.output

    def test_search_without_query_shows_examples(self, run):
        result = run('search')
        assert result.exit_code == 0
        assert '💡 Example queries:' in result.output
        assert 'block at golden hour' in result.output

    def test_search_unrecognized(self, run):
        result = run('search', 'zzz')
        assert "🤷 No filters recognized in 'zzz'" in result.output


class TestAlbumNaming:
    """albums canonical-name."""

    def test_teams_and_dates(self, run):
        result = run('albums', 'canonical-name', '--teams', 'Eagles,Hawks',
                     '--dates', '2024-05-01,2024-05-03')

        name = 'Eagles vs Hawks - May 2024'
        assert result.exit_code == 0
        assert f'PROPOSED: {name} ({len(name)} chars)' in result.output
        assert 'Date Source: FALLBACK' in result.output
        assert 'Confidence: MEDIUM' in result.output

    def test_existing_name(self, run):
        result = run('albums', 'canonical-name', '--name', 'Spring Invitational', '--json')
        payload = json.loads(result.output)
        assert payload['existing_name'] == 'Spring Invitational'
        assert payload['name'] == 'Spring Invite'

    def test_validate(self, run):
        assert run('albums', 'canonical-name', '--validate', '--name',
                   'Eagles vs Hawks - May 30').exit_code == 0

        result = run('albums', 'canonical-name', '--validate', '--name', 'Eagles  vs Hawks')
        assert result.exit_code == 1
        assert 'Name contains double spaces' in result.output

    def test_batch(self, run):
        result = run('albums', 'canonical-name', '--batch',
                     input='Spring Invitational\n\nSummer Invitational\n')
        assert result.output.splitlines() == [
            'Spring Invitational -> Spring Invite',
            'Summer Invitational -> Summer Invite',
        ]


class TestDatabaseCommands:
    """Commands run against an in-memory database."""

    def test_search(self, run, cli_db):
        cli_db(play_type='block', sport_type='volleyball')
        cli_db(play_type='block', sport_type='volleyball')
        cli_db(play_type='dig', sport_type='volleyball')

        result = run('search', 'block')
        assert result.exit_code == 0
        assert '🔍 block: 2 photos' in result.output

        payload = json.loads(run('search', 'block', '--json').output)
        assert payload['filters'] == {'play_type': 'block'}
        assert payload['total'] == 2

    def test_db_stats(self, run, cli_db):
        cli_db(sport_type='volleyball', album_key='a1')
        cli_db(sport_type='soccer')

        result = run('db', 'stats', '--column', 'sport_type')
        assert result.exit_code == 0
        assert '📸 Total photos: 2' in result.output
        assert 'volleyball' in result.output
        assert 'Photos without key:     1' in result.output

    def test_db_stats_unknown_column(self, run, cli_db):
        assert run('db', 'stats', '--column', 'nope').exit_code == 1

    def test_db_quality(self, run, cli_db):
        cli_db(sharpness=9, composition_score=9, emotional_impact=9, exposure_accuracy=9)

        result = run('db', 'quality')
        assert result.exit_code == 0
        assert '🔍 Quality Metrics Analysis' in result.output
        assert 'All enriched (baseline)' in result.output

    def test_refresh_albums_on_sqlite(self, run, cli_db):
        result = run('db', 'refresh-albums')
        assert 'albums_summary view not used on sqlite' in result.output
        assert '🧹 Cleared 0 cached layout entries' in result.output

    def test_albums_list(self, run, cli_db):
        assert 'No albums found' in run('albums', 'list').output

        cli_db(album_key='a1', album_name='Eagles vs Hawks', sport_type='volleyball')
        result = run('albums', 'list', '--json')
        rows = json.loads(result.output)
        assert [r['album_key'] for r in rows] == ['a1']

    def test_albums_verify(self, run, cli_db):
        cli_db(album_key='a1', album_name='Eagles vs Hawks')
        cli_db(album_key='a1', album_name='Eagles vs Hawks')
        cli_db(album_key='a1', album_name='Old Name')

        result = run('albums', 'verify')
        assert result.exit_code == 0
        assert '1/3 photos have stale album names' in result.output or \
            '2/3 photos have stale album names' in result.output
        assert '❌ Out of sync: 1/1' in result.output

        assert run('albums', 'verify', '--album-key', 'a1').exit_code == 1

    def test_taxonomy_infer(self, run, cli_db):
        cli_db(play_type='block')
        cli_db(keywords=['soccer'])

        result = run('taxonomy', 'infer')
        assert result.exit_code == 0
        assert '🏷️  Taxonomy inference' in result.output
        assert 'sport_from_play_type' in result.output

    def test_taxonomy_normalize_preview(self, run, cli_db):
        cli_db(emotion='joy')

        result = run('taxonomy', 'normalize', 'emotion')
        assert '📝 emotion: 1 values to normalize' in result.output
        assert '💡 Re-run with --apply' in result.output

        run('taxonomy', 'normalize', 'emotion', '--apply')
        assert '✅ All emotion values are canonical' in run('taxonomy', 'normalize', 'emotion').output

    def test_collections_generate_json(self, run, cli_db):
        cli_db(sharpness=9.5, composition_score=9.5, emotional_impact=9.5)

        result = run('collections', 'generate', '--json')
        payload = json.loads(result.output)

        assert len(payload) == 6
        assert payload[0]['slug'] == 'portfolio-excellence'
        assert payload[0]['photo_ids'] == ['p0001']
        assert payload[1]['stats']['total'] == 0

    def test_enrich_status(self, run, cli_db):
        cli_db()

        result = run('enrich', 'status')
        assert result.exit_code == 0
        assert '📊 Backfill Status (Last 24 Months)' in result.output

    def test_backfill_needs_api_key(self, run, cli_db):
        result = run('enrich', 'backfill')
        assert result.exit_code == 1
        assert 'Gemini API key not provided' in result.output
