"""
Enrichment CLI commands for Sportfolio

Runs the vision backfill jobs and reports their progress.
"""

import click
import logging

from . import ensure_database, fail, get_config, is_quiet
from ..db.connection import get_session
from ..db.operations import PhotoOperations
from ..enrichment.backfill import BackfillRunner, get_job
from ..enrichment.prompts import estimate_cost, DEFAULT_COST_PER_PHOTO
from ..enrichment.providers import create_provider, PROVIDERS
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _run_job(ctx, job_name: str, provider_name, prompt: str = 'delta', **options):
    config = get_config(ctx)
    enrichment = config.get('enrichment', {})
    ensure_database(ctx)

    try:
        provider = create_provider(config, provider_name)
    except ConfigurationError as e:
        fail(str(e))

    job = get_job(job_name, prompt)
    dry_run = options.pop('dry_run') or bool(enrichment.get('dry_run', False))
    batch_size = options.pop('batch_size') or int(enrichment.get('batch_size', 50))
    batch_delay_ms = options.pop('batch_delay_ms')
    if batch_delay_ms is None:
        batch_delay_ms = int(enrichment.get('batch_delay_ms', 1000))

    quiet = is_quiet(ctx)
    if not quiet:
        click.echo(f"🚀 {job.label} ({provider.name}, {job.prompt_kind} prompt)")
        if dry_run:
            click.echo("🔍 Dry run: nothing will be written")

    runner = BackfillRunner(
        get_session, provider, job,
        batch_size=batch_size,
        batch_delay_ms=batch_delay_ms,
        dry_run=dry_run,
        show_progress=not quiet,
        **options,
    )
    stats = runner.run()

    summary = stats.get_summary()
    click.echo(f"\n✅ {job.label} complete")
    click.echo(f"  Processed:  {summary['processed']}/{summary['total']}")
    click.echo(f"  Successful: {summary['successful']}")
    click.echo(f"  Failed:     {summary['failed']}")
    click.echo(f"  Cost:       ${summary['total_cost']:.4f}")
    for error in stats.errors[:10]:
        click.echo(f"  - {error['item']}: {error['error']}")
    if len(stats.errors) > 10:
        click.echo(f"  ... and {len(stats.errors) - 10} more errors")


def _common_options(func):
    func = click.option('--provider', '-p', type=click.Choice(sorted(PROVIDERS)),
                        help='Vision provider (default: enrichment.provider)')(func)
    func = click.option('--batch-size', '-b', type=int, help='Photos in flight per batch')(func)
    func = click.option('--batch-delay-ms', type=int, help='Pause between batches')(func)
    func = click.option('--limit', '-l', type=int, help='Process at most N photos')(func)
    func = click.option('--dry-run', is_flag=True, help='Call the provider but write nothing')(func)
    return func


@click.group()
def enrich():
    """AI enrichment commands"""
    pass


@enrich.command()
@_common_options
@click.option('--prompt', type=click.Choice(['delta', 'combined']), default=None,
              help='delta fills the 4 new fields only; combined re-asks everything')
@click.option('--months-back', '-m', type=int, help='Only photos from the last N months')
@click.option('--album', '-a', 'album_key', help='Only one album (ignores --months-back)')
@click.pass_context
def backfill(ctx, provider, batch_size, batch_delay_ms, limit, dry_run, prompt,
             months_back, album_key):
    """Fill lighting, color temperature, time in game and confidence"""
    enrichment = get_config(ctx).get('enrichment', {})
    if months_back is None:
        months_back = enrichment.get('months_back', 24)
    _run_job(ctx, 'schema_v2', provider, prompt or enrichment.get('prompt', 'delta'),
             batch_size=batch_size, batch_delay_ms=batch_delay_ms, limit=limit,
             dry_run=dry_run, months_back=months_back, album_key=album_key)


@enrich.command('play-types')
@_common_options
@click.option('--sport', '-s', help='Only photos of this sport')
@click.pass_context
def play_types(ctx, provider, batch_size, batch_delay_ms, limit, dry_run, sport):
    """Fill play_type on action photos that lack one"""
    _run_job(ctx, 'play_types', provider,
             batch_size=batch_size, batch_delay_ms=batch_delay_ms, limit=limit,
             dry_run=dry_run, sport=sport)


@enrich.command()
@_common_options
@click.option('--album', '-a', 'album_key', help='Only one album')
@click.pass_context
def full(ctx, provider, batch_size, batch_delay_ms, limit, dry_run, album_key):
    """Run the combined prompt on photos never enriched"""
    _run_job(ctx, 'full', provider,
             batch_size=batch_size, batch_delay_ms=batch_delay_ms, limit=limit,
             dry_run=dry_run, album_key=album_key)


@enrich.command()
@click.option('--months-back', '-m', type=int, default=24, help='Window for the backfill status')
@click.pass_context
def status(ctx, months_back):
    """Show backfill progress and enrichment coverage"""
    ensure_database(ctx)
    config = get_config(ctx)
    provider_name = config.get('enrichment', {}).get('provider', 'gemini')
    model = config.get(provider_name, {}).get('model') or ''
    cost = estimate_cost(model, 'delta') or DEFAULT_COST_PER_PHOTO

    with get_session() as session:
        ops = PhotoOperations(session)
        backfill_status = ops.backfill_status(months_back)
        coverage = ops.coverage_report()

    total = backfill_status['total']
    enriched = backfill_status['enriched']
    remaining = backfill_status['remaining']
    percent = (enriched / total * 100) if total else 0.0

    click.echo(f"\n📊 Backfill Status (Last {months_back} Months)\n")
    click.echo(f"Total photos:       {total:,}")
    click.echo(f"Enriched:           {enriched:,} ({percent:.1f}%)")
    click.echo(f"Remaining:          {remaining:,}")
    click.echo(f"Actual cost so far: ${enriched * cost:.2f}")
    click.echo(f"Est. remaining:     ${remaining * cost:.2f}")

    click.echo(f"\n🧾 Coverage ({coverage['total']:,} photos)\n")
    for field, entry in coverage['fields'].items():
        click.echo(f"  {field:<20} {entry['count']:>7,} ({entry['percentage']:.1f}%)")
    click.echo(f"\n  Fully scored:      {coverage['fully_scored']:,}")
    click.echo(f"  Recorded AI spend: ${coverage['total_cost']:.4f}")
