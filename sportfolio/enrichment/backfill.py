"""
Enrichment backfill jobs.

A job selects photos whose target columns are still NULL, sends each one
to a vision provider and writes the parsed answer back. Photos go out in
concurrent fixed-size batches with a flat delay between batches. A failed
photo is logged and counted; the run carries on. Because candidates are
selected by NULL columns, re-running a job resumes where it stopped.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from tqdm import tqdm

from .prompts import PROMPTS, parse_response, estimate_cost
from ..db.operations import PhotoOperations
from ..utils.async_processing import AsyncProcessor
from ..utils.logging import BatchStats

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50
DEFAULT_BATCH_DELAY_MS = 1000

DELTA_COLUMNS = ('lighting', 'color_temperature', 'time_in_game', 'ai_confidence')


@dataclass
class BackfillJob:
    name: str
    label: str
    prompt_kind: str
    # None writes every column the response carries
    columns: Optional[Tuple[str, ...]]


def get_job(name: str, prompt: str = 'delta') -> BackfillJob:
    """
    Job definition by name.

    Args:
        name: 'schema_v2', 'play_types' or 'full'
        prompt: For schema_v2, 'delta' (4 fields) or 'combined'
    """
    if name == 'schema_v2':
        if prompt not in ('delta', 'combined'):
            raise ValueError(f"schema_v2 prompt must be 'delta' or 'combined', got '{prompt}'")
        return BackfillJob('schema_v2', 'Schema v2 backfill', prompt, DELTA_COLUMNS)
    if name == 'play_types':
        return BackfillJob('play_types', 'Play type re-enrichment', 'bucket1', ('play_type',))
    if name == 'full':
        return BackfillJob('full', 'Full enrichment', 'combined', None)
    raise ValueError(f"Unknown backfill job: {name}")


class BackfillRunner:
    """Runs one backfill job against the database."""

    def __init__(self, session_factory: Callable, provider, job: BackfillJob,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS,
                 dry_run: bool = False, limit: Optional[int] = None,
                 months_back: Optional[int] = None, album_key: Optional[str] = None,
                 sport: Optional[str] = None, show_progress: bool = True):
        """
        Initialize the runner.

        Args:
            session_factory: Callable returning a session context manager
                (normally db.get_session)
            provider: VisionProvider
            job: BackfillJob to run
            batch_size: Photos in flight per batch
            batch_delay_ms: Flat pause between batches
            dry_run: Call the provider but write nothing
            limit: Process at most this many photos
            months_back: schema_v2 cutoff; ignored when album_key is set
            album_key: Restrict to one album
            sport: play_types sport filter
            show_progress: Show a tqdm progress bar
        """
        self.session_factory = session_factory
        self.provider = provider
        self.job = job
        self.batch_size = max(1, batch_size)
        self.batch_delay_ms = batch_delay_ms
        self.dry_run = dry_run
        self.limit = limit
        self.criteria = {'months_back': months_back, 'album_key': album_key, 'sport': sport}
        self.show_progress = show_progress
        self.prompt = PROMPTS[job.prompt_kind]
        self.cost_per_photo = estimate_cost(getattr(provider, 'model_name', None) or '',
                                            job.prompt_kind)
        self._sleep = asyncio.sleep

    def _criteria(self) -> Dict[str, Any]:
        if self.job.name == 'play_types':
            return {'sport': self.criteria['sport']}
        if self.job.name == 'full':
            return {'album_key': self.criteria['album_key']}
        return {'months_back': self.criteria['months_back'],
                'album_key': self.criteria['album_key']}

    def count_candidates(self) -> int:
        with self.session_factory() as session:
            return PhotoOperations(session).count_enrichment_candidates(
                self.job.name, **self._criteria())

    def fetch_candidates(self, limit: Optional[int]) -> List[Tuple[str, str]]:
        """(photo_id, image url) pairs, thumbnail preferred."""
        with self.session_factory() as session:
            photos = PhotoOperations(session).get_enrichment_candidates(
                self.job.name, limit=limit, **self._criteria())
            return [(p.photo_id, p.thumbnail_url or p.image_url) for p in photos]

    def enrich_one(self, item: Tuple[str, str]) -> Dict[str, Any]:
        """
        Fetch, analyze and parse one photo. Runs in a worker thread.

        Returns:
            Column values to write
        """
        photo_id, url = item
        text = self.provider.analyze_url(url, self.prompt)
        columns = parse_response(self.job.prompt_kind, text).to_columns()
        if self.job.columns is not None:
            columns = {k: v for k, v in columns.items() if k in self.job.columns}
        logger.debug(f"Enriched {photo_id}: {columns}")
        return columns

    def _write_one(self, photo_id: str, columns: Dict[str, Any]) -> None:
        # one transaction per photo
        with self.session_factory() as session:
            PhotoOperations(session).apply_enrichment(
                photo_id, columns,
                provider=getattr(self.provider, 'name', None),
                cost=self.cost_per_photo,
            )

    def _write_batch(self, batch: List[Tuple[str, str]], results: List[Any],
                     stats: BatchStats) -> None:
        for (photo_id, _), result in zip(batch, results):
            if isinstance(result, Exception):
                stats.add_failure(photo_id, str(result))
                logger.error(f"Failed: {photo_id} - {result}")
                continue

            if self.dry_run:
                stats.add_success(self.cost_per_photo)
                continue

            try:
                self._write_one(photo_id, result)
                stats.add_success(self.cost_per_photo)
            except SQLAlchemyError as e:
                stats.add_failure(photo_id, str(e))
                logger.error(f"Failed to update {photo_id}: {e}")

    def run(self) -> BatchStats:
        """
        Run the job to completion.

        Returns:
            BatchStats for the run
        """
        total = self.count_candidates()
        if self.limit and self.limit < total:
            logger.info(f"Found {total} photos needing {self.job.name}; limiting to {self.limit}")
            total = self.limit

        stats = BatchStats(total=total, label=self.job.label)
        if total == 0:
            logger.info(f"No photos need {self.job.name}")
            return stats

        items = self.fetch_candidates(total)
        stats.set_total(len(items))
        logger.info(f"Processing {len(items)} photos in batches of {self.batch_size} "
                    f"({self.job.prompt_kind} prompt, ${self.cost_per_photo:.6f}/photo)"
                    + (" [dry run]" if self.dry_run else ""))

        progress = tqdm(total=len(items), desc=self.job.label, unit='photo',
                        disable=not self.show_progress)

        def on_batch(batch, results):
            self._write_batch(batch, results, stats)
            progress.update(len(batch))
            logger.info(stats.format_progress())

        processor = None
        try:
            processor = AsyncProcessor(max_workers=self.batch_size, sleep=self._sleep)
            asyncio.run(processor.batch_process(
                items, self.enrich_one,
                batch_size=self.batch_size,
                batch_delay=self.batch_delay_ms / 1000,
                on_batch=on_batch,
            ))
        finally:
            progress.close()
            if processor is not None:
                processor.shutdown()

        logger.info(f"{self.job.label} complete: {stats.successful} succeeded, "
                    f"{stats.failed} failed, ${stats.total_cost:.4f}")
        return stats
