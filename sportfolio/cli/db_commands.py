"""
Database CLI commands for Sportfolio

Schema management, tag distributions and quality analysis.
"""

import click
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import ensure_database, fail, get_config
from ..analysis.quality_metrics import QualityAnalyzer, format_delta
from ..db.album_utils import AlbumManager
from ..db.connection import get_session, get_engine, init_database
from ..db.operations import PhotoOperations
from ..utils.caching import get_cache

logger = logging.getLogger(__name__)

STATS_COLUMNS = ('sport_type', 'photo_category', 'play_type', 'emotion', 'lighting')


@click.group()
def db():
    """Database management commands"""
    pass


@db.command()
@click.pass_context
def init(ctx):
    """Create the photo_metadata schema"""
    ensure_database(ctx)
    try:
        init_database()
    except SQLAlchemyError as e:
        fail(f"Schema creation failed: {e}")
    click.echo("✅ Database schema initialized")


@db.command()
def migrate():
    """Run Alembic migrations"""
    click.echo("Running database migrations...")

    from alembic import command
    from alembic.config import Config

    try:
        command.upgrade(Config("alembic.ini"), "head")
    except Exception as e:
        fail(f"Migration failed: {e}")

    click.echo("Migrations completed successfully")


@db.command()
@click.option('--column', '-c', 'columns', multiple=True,
              help='Column to show a distribution for (repeatable)')
@click.option('--top', '-n', default=10, help='Values shown per column')
@click.pass_context
def stats(ctx, columns, top):
    """Show photo counts, tag distributions and album sync status"""
    ensure_database(ctx)

    with get_session() as session:
        ops = PhotoOperations(session)
        total = ops.total_photos()
        click.echo(f"📸 Total photos: {total:,}")

        for column in columns or STATS_COLUMNS:
            try:
                rows = ops.distribution(column)
            except ValueError as e:
                fail(str(e))

            click.echo(f"\n📊 {column}:")
            if not rows:
                click.echo("  (no values)")
            for row in rows[:top]:
                click.echo(f"  {str(row['name']):<20} {row['count']:>7,} ({row['percentage']:.1f}%)")

        sync = AlbumManager(session).sync_stats()
        click.echo("\n📁 Albums:")
        click.echo(f"  Albums:                 {sync['total_albums']:,}")
        click.echo(f"  Photos with album key:  {sync['photos_with_album_key']:,}")
        click.echo(f"  Photos without key:     {sync['photos_without_album_key']:,}")
        click.echo(f"  Enriched (last 24h):    {sync['recently_enriched']:,}")


@db.command()
@click.pass_context
def quality(ctx):
    """Compare quality scores of story segments against all enriched photos"""
    ensure_database(ctx)

    with get_session() as session:
        report = QualityAnalyzer(session).analyze()

    click.echo("🔍 Quality Metrics Analysis\n")
    click.echo(f"{'Segment':<29} | {'Count':>6} | Sharp | Comp | Impact | Exposure")
    click.echo("-" * 73)
    for m in report['segments']:
        click.echo(f"{m.name:<29} | {m.count:>6} | {m.avg_sharpness:>5.1f} | "
                   f"{m.avg_composition:>4.1f} | {m.avg_impact:>6.1f} | {m.avg_exposure:>8.1f}")

    click.echo(f"\nDelta vs {report['baseline'].name}:\n")
    for name, delta in report['deltas'].items():
        click.echo(f"{name:<29} | {format_delta(delta['sharpness'])} | "
                   f"{format_delta(delta['composition'])} | {format_delta(delta['impact'])} | "
                   f"{format_delta(delta['exposure'])}")

    click.echo("\nQuality distribution (>= 9):")
    labels = {'sharpness': 'Sharpness', 'composition': 'Composition',
              'impact': 'Impact', 'triple': 'Triple excellent'}
    for key, label in labels.items():
        entry = report['distribution'][key]
        click.echo(f"  {label:<18} {entry['count']:>6,} ({entry['percentage']:.1f}%)")

    if report['collections_better']:
        click.echo("\n✅ Story segments beat the baseline on sharpness and impact")
    else:
        click.echo("\n⚠️  Story segments select for narrative, not technical quality")


@db.command('refresh-albums')
@click.pass_context
def refresh_albums(ctx):
    """Refresh the albums summary view and drop cached layout data"""
    ensure_database(ctx)

    engine = get_engine()
    if engine.dialect.name == 'postgresql':
        try:
            with get_session() as session:
                session.execute(text("SELECT refresh_albums_summary()"))
        except SQLAlchemyError as e:
            fail(f"Refresh failed: {e}")
        click.echo("✅ albums_summary refreshed")
    else:
        click.echo(f"albums_summary view not used on {engine.dialect.name}")

    removed = get_cache(get_config(ctx)).invalidate_layout()
    click.echo(f"🧹 Cleared {removed} cached layout entries")
