"""
Album name normalization.

Walks SmugMug albums, proposes canonical names, and pushes renames whose
drift score clears a threshold to SmugMug and to `photo_metadata.album_name`.
"""

import time
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from requests import RequestException

from .canonical import AlbumPhoto, SmugMugAlbumData, generate_canonical_name_from_smugmug
from ..exceptions import SportfolioError

logger = logging.getLogger(__name__)

DEFAULT_MIN_DRIFT_SCORE = 10
DEFAULT_RATE_LIMIT_MS = 500


@dataclass
class AlbumNormalizationResult:
    album_key: str
    existing_name: str
    proposed_name: str
    drift_score: int
    updated: bool
    db_photo_count: int = 0
    would_update: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class NormalizationStats:
    total: int = 0
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    start_time: datetime = field(default_factory=datetime.now)

    def elapsed_minutes(self) -> float:
        return (datetime.now() - self.start_time).total_seconds() / 60


def album_to_naming_input(album: Dict[str, Any], photos: List[Dict[str, Any]]) -> SmugMugAlbumData:
    """Convert SmugMug API album and image dicts into naming input."""
    return SmugMugAlbumData(
        album_key=album['AlbumKey'],
        name=album.get('Name') or '',
        date_start=album.get('DateStart'),
        date_end=album.get('DateEnd'),
        keywords=album.get('Keywords') or [],
        description=album.get('Description'),
        photos=[
            AlbumPhoto(
                exif=p.get('EXIF') or {},
                keywords=p.get('Keywords') or [],
                caption=p.get('Caption'),
            )
            for p in photos
        ],
    )


class AlbumNormalizer:
    """Proposes and applies canonical album names."""

    def __init__(self, smugmug, album_manager, min_drift_score: int = DEFAULT_MIN_DRIFT_SCORE,
                 dry_run: bool = False, skip_smugmug: bool = False,
                 rate_limit_ms: int = DEFAULT_RATE_LIMIT_MS, photo_sample: int = 100):
        """
        Args:
            smugmug: SmugMugClient
            album_manager: AlbumManager bound to an open session
            min_drift_score: Renames below this score are skipped
            dry_run: Compute proposals without writing anywhere
            skip_smugmug: Only sync the database
            rate_limit_ms: Delay between albums (not applied in dry run)
            photo_sample: Photos fetched per album for EXIF dates
        """
        self.smugmug = smugmug
        self.album_manager = album_manager
        self.min_drift_score = min_drift_score
        self.dry_run = dry_run
        self.skip_smugmug = skip_smugmug
        self.rate_limit_ms = rate_limit_ms
        self.photo_sample = photo_sample

    def normalize_album(self, album: Dict[str, Any],
                        db_photo_count: int = 0) -> AlbumNormalizationResult:
        """
        Normalize one album. Errors are captured in the result, never raised.
        """
        album_key = album['AlbumKey']
        existing_name = album.get('Name') or ''

        try:
            photos = self.smugmug.get_album_photos(album_key, self.photo_sample)
            name_result = generate_canonical_name_from_smugmug(album_to_naming_input(album, photos))
            proposed = name_result.name
            drift = name_result.drift_score or 0

            result = AlbumNormalizationResult(
                album_key=album_key,
                existing_name=existing_name,
                proposed_name=proposed,
                drift_score=drift,
                updated=False,
                db_photo_count=db_photo_count,
            )

            if drift < self.min_drift_score:
                return result

            result.would_update = True
            if self.dry_run:
                return result

            if not self.skip_smugmug:
                self.smugmug.update_album(album_key, {'Name': proposed})

            _, errors = self.album_manager.sync_album_name(album_key, proposed)
            if errors:
                result.error = ', '.join(errors)
                return result

            result.updated = True
            return result

        except (SportfolioError, RequestException, KeyError, ValueError) as e:
            logger.error(f"Failed to normalize album {album_key}: {e}")
            return AlbumNormalizationResult(
                album_key=album_key,
                existing_name=existing_name,
                proposed_name=existing_name,
                drift_score=0,
                updated=False,
                db_photo_count=db_photo_count,
                error=str(e),
            )

    def normalize_all(self, limit: Optional[int] = None, on_result=None) -> Dict[str, Any]:
        """
        Normalize every SmugMug album, sequentially.

        Args:
            limit: Only process the first N albums
            on_result: Optional callback(stats, result) after each album

        Returns:
            Dict with 'results' and 'stats'
        """
        albums = self.smugmug.get_all_albums()
        if limit and limit < len(albums):
            logger.info(f"Processing only the first {limit} of {len(albums)} albums")
            albums = albums[:limit]

        photo_counts = {a['album_key']: a['photo_count']
                        for a in self.album_manager.albums_summary()}

        stats = NormalizationStats(total=len(albums))
        results: List[AlbumNormalizationResult] = []

        for album in albums:
            result = self.normalize_album(album, photo_counts.get(album.get('AlbumKey'), 0))
            results.append(result)

            if result.updated:
                stats.updated += 1
            elif result.error:
                stats.errors += 1
            else:
                stats.skipped += 1
            stats.processed += 1

            if on_result:
                on_result(stats, result)

            if stats.processed < stats.total and not self.dry_run:
                time.sleep(self.rate_limit_ms / 1000)

        logger.info(f"Normalized {stats.processed} albums: {stats.updated} updated, "
                    f"{stats.skipped} skipped, {stats.errors} errors")
        return {'results': results, 'stats': stats}
