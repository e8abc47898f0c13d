"""
Album management utilities for Sportfolio.

Albums are not a table of their own: they are the distinct `album_key`
values on `photo_metadata`. This module aggregates them into an albums
summary and keeps `album_name` in sync with SmugMug.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Dict, Optional, Tuple, Any

from sqlalchemy import func, desc, asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import PhotoMetadata

logger = logging.getLogger(__name__)


class AlbumManager:
    """Manages albums derived from photo metadata."""

    def __init__(self, session: Session, cache=None):
        """
        Initialize with database session.

        Args:
            session: SQLAlchemy session
            cache: Optional SportfolioCache for the albums summary
        """
        self.session = session
        self.cache = cache

    def _summarize(self, album_key: str, photos: List[PhotoMetadata]) -> Dict[str, Any]:
        sports = Counter(p.sport_type for p in photos if p.sport_type)
        primary_sport = None
        if sports:
            # Most frequent, ties broken alphabetically
            primary_sport = sorted(sports.items(), key=lambda item: (-item[1], item[0]))[0][0]

        dates = [p.photo_date for p in photos if p.photo_date]
        cover = max(
            photos,
            key=lambda p: (
                p.emotional_impact if p.emotional_impact is not None else -1.0,
                p.photo_date or datetime.min,
            ),
        )
        names = [p.album_name for p in photos if p.album_name]

        return {
            'album_key': album_key,
            'album_name': names[0] if names else None,
            'photo_count': len(photos),
            'primary_sport': primary_sport,
            'earliest_date': min(dates) if dates else None,
            'latest_date': max(dates) if dates else None,
            'cover_photo_id': cover.photo_id,
            'cover_image_url': cover.best_url,
            'enriched_count': sum(1 for p in photos if p.enriched_at is not None),
        }

    def _load_albums_summary(self) -> List[Dict[str, Any]]:
        photos = (self.session.query(PhotoMetadata)
                  .filter(PhotoMetadata.album_key.isnot(None))
                  .order_by(asc(PhotoMetadata.album_key),
                            asc(PhotoMetadata.photo_date).nulls_first(),
                            asc(PhotoMetadata.photo_id))
                  .all())

        grouped: Dict[str, List[PhotoMetadata]] = {}
        for photo in photos:
            grouped.setdefault(photo.album_key, []).append(photo)

        summaries = [self._summarize(key, group) for key, group in grouped.items()]
        summaries.sort(key=lambda s: s['latest_date'] or datetime.min, reverse=True)
        return summaries

    def albums_summary(self) -> List[Dict[str, Any]]:
        """
        One aggregate row per album, newest first.

        Returns:
            List of dicts with album_key, album_name, photo_count,
            primary_sport, earliest_date, latest_date, cover photo
        """
        if self.cache is None:
            return self._load_albums_summary()
        return self.cache.get_or_load('albums', 'summary', self._load_albums_summary)

    def get_album(self, album_key: str) -> Optional[Dict[str, Any]]:
        """Summary row for one album, or None when it has no photos."""
        photos = self.get_album_photos(album_key)
        if not photos:
            return None
        return self._summarize(album_key, photos)

    def get_album_photos(self, album_key: str, limit: Optional[int] = None) -> List[PhotoMetadata]:
        query = (self.session.query(PhotoMetadata)
                 .filter(PhotoMetadata.album_key == album_key)
                 .order_by(asc(PhotoMetadata.photo_date).nulls_first(), asc(PhotoMetadata.photo_id)))
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_all_album_keys(self) -> List[str]:
        rows = (self.session.query(PhotoMetadata.album_key)
                .filter(PhotoMetadata.album_key.isnot(None))
                .distinct().order_by(asc(PhotoMetadata.album_key)).all())
        return [key for (key,) in rows]

    def sync_album_name(self, album_key: str, album_name: str) -> Tuple[int, List[str]]:
        """
        Set album_name on every photo of an album and commit it.

        Each album is its own transaction, so a failure only rolls back
        that album and earlier renames stay in place.

        Args:
            album_key: SmugMug album key
            album_name: New display name

        Returns:
            Tuple of (photos updated, error messages)
        """
        errors: List[str] = []
        try:
            updated = (self.session.query(PhotoMetadata)
                       .filter(PhotoMetadata.album_key == album_key)
                       .update({PhotoMetadata.album_name: album_name},
                               synchronize_session='fetch'))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to sync album name for {album_key}: {e}")
            errors.append(str(e))
            return 0, errors

        logger.info(f"Synced album name for {album_key}: {updated} photos")
        return updated, errors

    def verify_album_sync(self, album_key: str, expected_name: str) -> Dict[str, Any]:
        """
        Check that every photo of an album carries the expected name.

        Returns:
            Dict with synced, photo_count and issues
        """
        photos = self.get_album_photos(album_key)
        if not photos:
            return {
                'synced': False,
                'photo_count': 0,
                'issues': [f"No photos found for album_key: {album_key}"],
            }

        stale = [p for p in photos if p.album_name != expected_name]
        issues: List[str] = []
        if stale:
            issues.append(f"{len(stale)}/{len(photos)} photos have stale album names")
            for photo in stale[:3]:
                issues.append(f"  {photo.photo_id}: \"{photo.album_name}\"")
            if len(stale) > 3:
                issues.append(f"  ... and {len(stale) - 3} more")

        return {
            'synced': not stale,
            'photo_count': len(photos),
            'issues': issues,
        }

    def batch_sync_albums(self, albums: List[Tuple[str, str]]) -> Dict[str, Any]:
        """
        Sync names for many albums; failures are counted and skipped.

        Args:
            albums: List of (album_key, album_name)

        Returns:
            Dict with success, failed and errors
        """
        results = {'success': 0, 'failed': 0, 'errors': []}

        for album_key, album_name in albums:
            updated, errors = self.sync_album_name(album_key, album_name)
            if errors:
                results['failed'] += 1
                results['errors'].append({'album_key': album_key, 'error': '; '.join(errors)})
            else:
                results['success'] += 1

        logger.info(f"Batch sync: {results['success']} succeeded, {results['failed']} failed")
        return results

    def sync_stats(self) -> Dict[str, Any]:
        """Album-key coverage and recent enrichment counts."""
        total_photos = self.session.query(func.count(PhotoMetadata.photo_id)).scalar() or 0
        with_key = (self.session.query(func.count(PhotoMetadata.photo_id))
                    .filter(PhotoMetadata.album_key.isnot(None)).scalar()) or 0
        total_albums = (self.session.query(func.count(func.distinct(PhotoMetadata.album_key)))
                        .filter(PhotoMetadata.album_key.isnot(None)).scalar()) or 0
        since = datetime.utcnow() - timedelta(hours=24)
        recent = (self.session.query(func.count(PhotoMetadata.photo_id))
                  .filter(PhotoMetadata.enriched_at >= since).scalar()) or 0

        return {
            'total_albums': total_albums,
            'total_photos': total_photos,
            'photos_with_album_key': with_key,
            'photos_without_album_key': total_photos - with_key,
            'recently_enriched': recent,
        }

    def albums_by_primary_sport(self, sport: str) -> List[Dict[str, Any]]:
        """Summary rows whose primary sport equals `sport`."""
        return [a for a in self.albums_summary() if a['primary_sport'] == sport]
