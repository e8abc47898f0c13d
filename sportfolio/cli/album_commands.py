"""
Album CLI commands for Sportfolio

Album summaries, canonical names, SmugMug renames and sync checks.
"""

import sys
import json
import click
import logging

from . import ensure_database, fail, get_config, is_quiet
from ..db.album_utils import AlbumManager
from ..db.connection import get_session
from ..exceptions import SportfolioError
from ..naming.canonical import (
    SmugMugAlbumData, AlbumNameInput, Teams,
    generate_canonical_name, generate_canonical_name_from_smugmug, validate_canonical_name,
)
from ..naming.normalizer import AlbumNormalizer, album_to_naming_input
from ..smugmug.client import SmugMugClient
from ..utils.caching import get_cache

logger = logging.getLogger(__name__)


def _smugmug_client(ctx) -> SmugMugClient:
    try:
        return SmugMugClient.from_config(get_config(ctx))
    except SportfolioError as e:
        fail(str(e))


@click.group()
def albums():
    """Album management commands"""
    pass


@albums.command('list')
@click.option('--sport', '-s', help='Only albums whose primary sport is this')
@click.option('--limit', '-l', type=int, default=50, help='Albums to show')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def list_albums(ctx, sport, limit, as_json):
    """List albums, newest first"""
    ensure_database(ctx)

    with get_session() as session:
        manager = AlbumManager(session, cache=get_cache(get_config(ctx)))
        rows = manager.albums_by_primary_sport(sport) if sport else manager.albums_summary()

    rows = rows[:limit] if limit else rows
    if as_json:
        click.echo(json.dumps(rows, indent=2, default=str))
        return

    if not rows:
        click.echo("No albums found")
        return

    for row in rows:
        latest = row['latest_date'].strftime('%Y-%m-%d') if row['latest_date'] else '----------'
        click.echo(f"{latest}  {row['album_key']:<10} {row['photo_count']:>5}  "
                   f"{(row['primary_sport'] or '-'):<11} {row['album_name'] or ''}")


@albums.command('canonical-name')
@click.option('--name', help='Existing album name to normalize')
@click.option('--teams', help='Matchup as "Home,Away"')
@click.option('--event', help='Event name')
@click.option('--sport', help='Sport type')
@click.option('--date', 'date_', help='Single date (YYYY-MM-DD)')
@click.option('--dates', help='Date range as "start,end"')
@click.option('--smugmug', 'smugmug_file', type=click.Path(exists=True, dir_okay=False),
              help='SmugMug album JSON export (uses EXIF dates and enrichment)')
@click.option('--album-key', help='Fetch the album from the SmugMug API')
@click.option('--batch', is_flag=True, help='Read album names from stdin, one per line')
@click.option('--validate', 'validate_only', is_flag=True, help="Only validate, don't generate")
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def canonical_name(ctx, name, teams, event, sport, date_, dates, smugmug_file, album_key,
                   batch, validate_only, as_json):
    """Generate a canonical album name"""
    if validate_only:
        if not name:
            fail("--validate needs --name")
        result = validate_canonical_name(name)
        if as_json:
            click.echo(json.dumps(result, indent=2))
        else:
            click.echo(f"{'✅ Valid' if result['valid'] else '❌ Invalid'}: {name}")
            for error in result['errors']:
                click.echo(f"  error: {error}")
            for warning in result['warnings']:
                click.echo(f"  warning: {warning}")
        if not result['valid']:
            sys.exit(1)
        return

    if batch:
        for line in click.get_text_stream('stdin'):
            line = line.strip()
            if not line:
                continue
            result = generate_canonical_name(AlbumNameInput(current_name=line))
            if as_json:
                click.echo(json.dumps({'existing_name': line, **result.to_dict()}))
            else:
                click.echo(f"{line} -> {result.name}")
        return

    if smugmug_file or album_key:
        if smugmug_file:
            with open(smugmug_file, 'r') as f:
                album = SmugMugAlbumData.from_dict(json.load(f))
            if album_key and not album.album_key:
                album.album_key = album_key
        else:
            client = _smugmug_client(ctx)
            try:
                raw_album = client.get_album(album_key)
                photos = client.get_album_photos(album_key, 100)
            except SportfolioError as e:
                fail(str(e))
            album = album_to_naming_input(raw_album, photos)

        result = generate_canonical_name_from_smugmug(album)
        existing = album.name
        key = album.album_key
    else:
        if not (name or teams or event):
            fail("Provide --name, --teams, --event, --smugmug or --album-key")

        name_input = AlbumNameInput(current_name=name, sport_type=sport, event_name=event)
        if teams:
            parts = [t.strip() for t in teams.split(',')]
            if len(parts) != 2 or not all(parts):
                fail('--teams must be "Home,Away"')
            name_input.teams = Teams(parts[0], parts[1])
        if dates:
            start, _, end = dates.partition(',')
            name_input.earliest_photo_date = start.strip() or None
            name_input.latest_photo_date = end.strip() or start.strip() or None
        elif date_:
            name_input.earliest_photo_date = date_
            name_input.latest_photo_date = date_

        result = generate_canonical_name(name_input)
        existing = name
        key = album_key

    if as_json:
        click.echo(json.dumps({'album_key': key, 'existing_name': existing, **result.to_dict()},
                              indent=2))
        return

    if key:
        click.echo(f"📁 Album: {key}")
    if existing:
        click.echo(f"EXISTING: {existing}")
    click.echo(f"PROPOSED: {result.name} ({result.length} chars)")
    click.echo(f"Date Source: {result.metadata['date_source'].upper()}")
    click.echo(f"Confidence: {result.metadata['confidence'].upper()}")
    if result.drift_score is not None:
        click.echo(f"Drift Score: {result.drift_score}/100")
        for change in (result.drift_analysis or {}).get('changes', []):
            click.echo(f"  • {change}")
    if result.truncated:
        click.echo("⚠️  Name was truncated")


@albums.command()
@click.option('--dry-run', is_flag=True, help='Show proposals without renaming')
@click.option('--skip-smugmug', is_flag=True, help='Only update the database')
@click.option('--limit', '-l', type=int, help='Only the first N albums')
@click.option('--min-drift', type=int, help='Skip renames scoring below this')
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help='Write per-album results as JSON')
@click.pass_context
def normalize(ctx, dry_run, skip_smugmug, limit, min_drift, output):
    """Rename every SmugMug album to its canonical name"""
    config = get_config(ctx)
    naming = config.get('naming', {})
    ensure_database(ctx)
    client = _smugmug_client(ctx)
    quiet = is_quiet(ctx)

    if not quiet:
        click.echo("🔄 Normalizing album names" + (" (dry run)" if dry_run else ""))

    def on_result(stats, result):
        if quiet:
            return
        if result.error:
            marker = '❌'
        elif result.updated:
            marker = '✅'
        elif result.would_update:
            marker = '📝'
        else:
            marker = '⏭️ '
        click.echo(f"[{stats.processed}/{stats.total}] {marker} {result.album_key}: "
                   f"{result.existing_name} -> {result.proposed_name} "
                   f"(drift {result.drift_score})")

    with get_session() as session:
        normalizer = AlbumNormalizer(
            client, AlbumManager(session),
            min_drift_score=min_drift if min_drift is not None else int(naming.get('min_drift_score', 10)),
            dry_run=dry_run,
            skip_smugmug=skip_smugmug,
            rate_limit_ms=int(naming.get('rate_limit_ms', 500)),
            photo_sample=int(naming.get('photo_sample', 100)),
        )
        try:
            outcome = normalizer.normalize_all(limit=limit, on_result=on_result)
        except SportfolioError as e:
            fail(str(e))

    stats = outcome['stats']
    would_update = sum(1 for r in outcome['results'] if r.would_update)
    click.echo(f"\n📊 Processed {stats.processed} albums in {stats.elapsed_minutes():.1f} min")
    click.echo(f"  Updated: {stats.updated}")
    if dry_run:
        click.echo(f"  Would update: {would_update}")
    click.echo(f"  Skipped: {stats.skipped}")
    click.echo(f"  Errors:  {stats.errors}")

    if output:
        with open(output, 'w') as f:
            json.dump([r.to_dict() for r in outcome['results']], f, indent=2)
        click.echo(f"💾 Results written to {output}")

    if not dry_run:
        get_cache(config).invalidate_layout()


@albums.command()
@click.option('--album-key', '-a', help='Check one album only')
@click.option('--fix', is_flag=True, help='Re-sync mismatched albums to their SmugMug name')
@click.option('--verbose', '-v', 'show_all', is_flag=True, help='List synced albums too')
@click.pass_context
def verify(ctx, album_key, fix, show_all):
    """Check that every photo of an album carries the same album name"""
    ensure_database(ctx)

    with get_session() as session:
        manager = AlbumManager(session)
        summaries = manager.albums_summary()

        if album_key:
            summaries = [s for s in summaries if s['album_key'] == album_key]
            if not summaries:
                fail(f"Album not found: {album_key}")
        else:
            sync = manager.sync_stats()
            click.echo("📊 Overview:")
            click.echo(f"  Total Albums: {sync['total_albums']}")
            click.echo(f"  Total Photos: {sync['total_photos']}")
            click.echo(f"  Photos with album_key: {sync['photos_with_album_key']}")
            click.echo(f"  Photos without album_key: {sync['photos_without_album_key']}")
            click.echo(f"  Recently enriched (24h): {sync['recently_enriched']}")

        out_of_sync = []
        for summary in summaries:
            key, name = summary['album_key'], summary['album_name'] or ''
            result = manager.verify_album_sync(key, name)
            if result['synced']:
                if show_all or album_key:
                    click.echo(f"✅ {key}: {name} ({result['photo_count']} photos)")
                continue
            out_of_sync.append(key)
            click.echo(f"❌ {key}: {name} ({result['photo_count']} photos)")
            for issue in result['issues']:
                click.echo(f"   {issue}")

        if fix and out_of_sync:
            client = _smugmug_client(ctx)
            pairs = []
            for key in out_of_sync:
                try:
                    pairs.append((key, client.get_album(key)['Name']))
                except (SportfolioError, KeyError) as e:
                    click.echo(f"❌ Could not fetch {key} from SmugMug: {e}", err=True)
            fixed = manager.batch_sync_albums(pairs)
            click.echo(f"🔧 Re-synced {fixed['success']} albums, {fixed['failed']} failed")

    total = len(summaries)
    click.echo(f"\n📊 Results:")
    click.echo(f"  ✅ Synced: {total - len(out_of_sync)}/{total}")
    click.echo(f"  ❌ Out of sync: {len(out_of_sync)}/{total}")

    if album_key and out_of_sync and not fix:
        sys.exit(1)
