"""
Taxonomy CLI commands for Sportfolio
"""

import click
import logging

from . import ensure_database, fail, get_config
from ..db.album_utils import AlbumManager
from ..db.connection import get_session
from ..taxonomy.inference import TaxonomyInferencer
from ..taxonomy.misclassification import (
    find_misclassifications, fix_misclassifications, group_by_reason,
)
from ..taxonomy.normalization import NORMALIZERS, preview_normalization, apply_normalization
from ..utils.caching import get_cache

logger = logging.getLogger(__name__)


@click.group()
def taxonomy():
    """Sport taxonomy commands"""
    pass


@taxonomy.command()
@click.option('--dry-run', is_flag=True, help='Count changes without saving them')
@click.pass_context
def infer(ctx, dry_run):
    """Fill missing sport_type, photo_category and action_type"""
    ensure_database(ctx)

    with get_session() as session:
        inferencer = TaxonomyInferencer(session)
        counts = inferencer.run(dry_run=dry_run)
        coverage = inferencer.coverage()

    click.echo("🏷️  Taxonomy inference" + (" (dry run)" if dry_run else ""))
    for step, count in counts.items():
        click.echo(f"  {step:<24} {count:>7,}")

    total = coverage['total'] or 1
    click.echo("\n📊 Coverage:")
    for column in ('sport_type', 'photo_category', 'action_type'):
        click.echo(f"  {column:<24} {coverage[column]:>7,} ({coverage[column] / total * 100:.1f}%)")


@taxonomy.command()
@click.option('--fix', is_flag=True, help='Apply the suggested sport to every photo')
@click.pass_context
def misclassified(ctx, fix):
    """Find albums wrongly labelled volleyball"""
    ensure_database(ctx)

    with get_session() as session:
        found = find_misclassifications(AlbumManager(session).albums_summary())

        if not found:
            click.echo("✅ No misclassified albums found")
            return

        click.echo(f"🔍 Found {len(found)} misclassified albums\n")
        for reason, items in group_by_reason(found).items():
            click.echo(f"{reason} ({len(items)}):")
            for item in items:
                click.echo(f"  {item.album_key:<10} {item.album_name} "
                           f"({item.photo_count} photos) -> {item.suggested_sport}")

        total_photos = sum(item.photo_count for item in found)
        if not fix:
            click.echo(f"\n💡 {total_photos} photos would change. Re-run with --fix to apply.")
            return

        results = fix_misclassifications(session, found)

    click.echo(f"\n✅ Fixed {results['fixed']} albums ({results['photos_updated']} photos), "
               f"{results['errors']} errors")
    get_cache(get_config(ctx)).invalidate_layout()


@taxonomy.command()
@click.argument('field', type=click.Choice(sorted(NORMALIZERS)))
@click.option('--apply', 'apply_changes', is_flag=True, help='Write the normalized values')
@click.pass_context
def normalize(ctx, field, apply_changes):
    """Map drifted FIELD values back to the canonical set"""
    ensure_database(ctx)

    with get_session() as session:
        try:
            changes = preview_normalization(session, field)
        except ValueError as e:
            fail(str(e))

        if not changes:
            click.echo(f"✅ All {field} values are canonical")
            return

        click.echo(f"📝 {field}: {len(changes)} values to normalize")
        for change in changes:
            sport = f" [{change['sport_type']}]" if 'sport_type' in change else ''
            click.echo(f"  {change['original']!s:<30} -> {change['normalized']!s:<20} "
                       f"({change['count']} photos){sport}")

        if not apply_changes:
            click.echo("\n💡 Re-run with --apply to write these changes")
            return

        changed = apply_normalization(session, field)

    click.echo(f"\n✅ Normalized {changed} photos")
