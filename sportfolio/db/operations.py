"""
Database operations for Sportfolio.

High-level queries and writes over `photo_metadata`: photo upserts,
enrichment candidate selection and write-back, filtered search, value
distributions and enrichment coverage.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any, Tuple

from sqlalchemy import func, desc, asc
from sqlalchemy.orm import Session, Query

from .models import PhotoMetadata, SCORE_COLUMNS

logger = logging.getLogger(__name__)

# Search filter name -> column
FILTER_COLUMNS = {
    'sport': 'sport_type',
    'sport_type': 'sport_type',
    'category': 'photo_category',
    'photo_category': 'photo_category',
    'play_type': 'play_type',
    'action_intensity': 'action_intensity',
    'lighting': 'lighting',
    'color_temperature': 'color_temperature',
    'time_of_day': 'time_of_day',
    'composition': 'composition',
    'emotion': 'emotion',
    'album_key': 'album_key',
    'collection_slug': 'collection_slug',
}

SORT_COLUMNS = ('photo_date', 'upload_date', 'sharpness', 'composition_score',
                'emotional_impact', 'exposure_accuracy')

# Columns exposed as filter options
FILTER_OPTION_COLUMNS = ('sport_type', 'photo_category', 'play_type', 'action_intensity',
                         'lighting', 'color_temperature', 'time_of_day', 'composition')

# Columns an enrichment pass may write
ENRICHMENT_FIELDS = (
    'play_type', 'action_intensity', 'sport_type', 'photo_category', 'composition',
    'time_of_day', 'lighting', 'color_temperature', 'emotion', 'sharpness',
    'composition_score', 'exposure_accuracy', 'emotional_impact', 'time_in_game',
    'ai_confidence',
)

ENRICHMENT_JOBS = ('schema_v2', 'play_types', 'full')


def months_ago(months: int, now: Optional[datetime] = None) -> datetime:
    """Same day-of-month `months` calendar months before `now`, clamped to month end."""
    now = now or datetime.utcnow()
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp to the last day of the target month
    next_month = datetime(year + (month // 12), (month % 12) + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return now.replace(year=year, month=month, day=min(now.day, last_day))


class PhotoOperations:
    """Operations for managing photo metadata in the database."""

    def __init__(self, session: Session):
        self.session = session

    # Photos

    def get_photo(self, photo_id: str) -> Optional[PhotoMetadata]:
        return self.session.get(PhotoMetadata, photo_id)

    def upsert_photo(self, data: Dict[str, Any]) -> PhotoMetadata:
        """
        Insert a photo or update the columns present in `data`.

        Args:
            data: Column values; must include photo_id

        Returns:
            The persisted PhotoMetadata
        """
        photo_id = data['photo_id']
        photo = self.session.get(PhotoMetadata, photo_id)
        columns = set(PhotoMetadata.__table__.columns.keys())

        if photo is None:
            photo = PhotoMetadata(**{k: v for k, v in data.items() if k in columns})
            self.session.add(photo)
            logger.debug(f"Inserted photo {photo_id}")
        else:
            for key, value in data.items():
                if key in columns and key != 'photo_id':
                    setattr(photo, key, value)
            logger.debug(f"Updated photo {photo_id}")

        self.session.flush()
        return photo

    # Enrichment

    def _candidate_query(self, job: str, months_back: Optional[int] = None,
                         album_key: Optional[str] = None,
                         sport: Optional[str] = None) -> Query:
        if job not in ENRICHMENT_JOBS:
            raise ValueError(f"Unknown enrichment job: {job}")

        query = self.session.query(PhotoMetadata)

        if job == 'schema_v2':
            query = query.filter(PhotoMetadata.lighting.is_(None))
            if album_key:
                query = query.filter(PhotoMetadata.album_key == album_key)
            elif months_back:
                query = query.filter(PhotoMetadata.photo_date >= months_ago(months_back))
        elif job == 'play_types':
            query = query.filter(
                PhotoMetadata.photo_category == 'action',
                PhotoMetadata.play_type.is_(None),
            )
            if sport:
                query = query.filter(PhotoMetadata.sport_type == sport)
        else:
            query = query.filter(PhotoMetadata.enriched_at.is_(None))
            if album_key:
                query = query.filter(PhotoMetadata.album_key == album_key)

        return query

    def count_enrichment_candidates(self, job: str, **criteria) -> int:
        return self._candidate_query(job, **criteria).count()

    def get_enrichment_candidates(self, job: str, limit: Optional[int] = None,
                                  **criteria) -> List[PhotoMetadata]:
        """
        Photos still missing the columns `job` fills, newest first.

        Args:
            job: 'schema_v2', 'play_types' or 'full'
            limit: Maximum rows to fetch
            **criteria: months_back, album_key, sport

        Returns:
            List of PhotoMetadata
        """
        query = self._candidate_query(job, **criteria).order_by(
            desc(PhotoMetadata.photo_date), asc(PhotoMetadata.photo_id)
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def backfill_status(self, months_back: Optional[int] = 24) -> Dict[str, int]:
        """Schema v2 progress within the window: total, enriched (lighting set), remaining."""
        query = self.session.query(func.count(PhotoMetadata.photo_id))
        if months_back:
            query = query.filter(PhotoMetadata.photo_date >= months_ago(months_back))

        total = query.scalar() or 0
        enriched = query.filter(PhotoMetadata.lighting.isnot(None)).scalar() or 0
        return {'total': total, 'enriched': enriched, 'remaining': total - enriched}

    def apply_enrichment(self, photo_id: str, fields: Dict[str, Any],
                         provider: Optional[str] = None,
                         cost: Optional[float] = None) -> bool:
        """
        Write enrichment results onto a photo.

        Unknown keys and None values are ignored.

        Returns:
            True if the photo exists and was updated
        """
        photo = self.session.get(PhotoMetadata, photo_id)
        if photo is None:
            logger.warning(f"Photo not found for enrichment: {photo_id}")
            return False

        for key, value in fields.items():
            if key in ENRICHMENT_FIELDS and value is not None:
                setattr(photo, key, value)

        if provider:
            photo.ai_provider = provider
        if cost is not None:
            photo.ai_cost = cost
        photo.enriched_at = datetime.utcnow()
        self.session.flush()
        return True

    # Search

    def search(self, filters: Optional[Dict[str, Any]] = None, sort: str = 'photo_date',
               limit: int = 24, offset: int = 0) -> Tuple[List[PhotoMetadata], int]:
        """
        Filter photos by their tag columns.

        Args:
            filters: Filter name -> value; list values match any
            sort: Sort column, always descending
            limit: Page size
            offset: Page offset

        Returns:
            Tuple of (photos, total matching count)
        """
        query = self.session.query(PhotoMetadata)

        for name, value in (filters or {}).items():
            if value is None or value == [] or name not in FILTER_COLUMNS:
                continue
            column = getattr(PhotoMetadata, FILTER_COLUMNS[name])
            if isinstance(value, (list, tuple, set)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)

        total = query.count()

        if sort not in SORT_COLUMNS:
            sort = 'photo_date'
        photos = (query.order_by(desc(getattr(PhotoMetadata, sort)), asc(PhotoMetadata.photo_id))
                  .offset(offset).limit(limit).all())
        return photos, total

    def related_photos(self, photo_id: str, limit: int = 6) -> List[PhotoMetadata]:
        """Photos from the same album, topped up with same sport and play type."""
        photo = self.get_photo(photo_id)
        if photo is None:
            return []

        related: List[PhotoMetadata] = []
        if photo.album_key:
            related = (self.session.query(PhotoMetadata)
                       .filter(PhotoMetadata.album_key == photo.album_key,
                               PhotoMetadata.photo_id != photo_id)
                       .order_by(desc(PhotoMetadata.emotional_impact), asc(PhotoMetadata.photo_id))
                       .limit(limit).all())

        if len(related) < limit and photo.sport_type and photo.play_type:
            seen = {p.photo_id for p in related} | {photo_id}
            extra = (self.session.query(PhotoMetadata)
                     .filter(PhotoMetadata.sport_type == photo.sport_type,
                             PhotoMetadata.play_type == photo.play_type,
                             PhotoMetadata.photo_id.notin_(seen))
                     .order_by(desc(PhotoMetadata.emotional_impact), asc(PhotoMetadata.photo_id))
                     .limit(limit - len(related)).all())
            related.extend(extra)

        return related

    # Statistics

    def total_photos(self) -> int:
        return self.session.query(func.count(PhotoMetadata.photo_id)).scalar() or 0

    def distribution(self, column: str) -> List[Dict[str, Any]]:
        """
        Value counts for one column, most common first.

        Returns:
            List of {'name', 'count', 'percentage'}; percentage of all photos
        """
        if column not in PhotoMetadata.__table__.columns:
            raise ValueError(f"Unknown column: {column}")

        col = getattr(PhotoMetadata, column)
        total = self.total_photos()
        rows = (self.session.query(col, func.count(PhotoMetadata.photo_id))
                .filter(col.isnot(None))
                .group_by(col)
                .order_by(desc(func.count(PhotoMetadata.photo_id)), asc(col))
                .all())

        return [
            {
                'name': value,
                'count': count,
                'percentage': round(count / total * 100, 1) if total else 0.0,
            }
            for value, count in rows
        ]

    def coverage_report(self) -> Dict[str, Any]:
        """Non-null counts for each enrichment field."""
        total = self.total_photos()
        fields = {}
        for field in ENRICHMENT_FIELDS + ('enriched_at',):
            count = (self.session.query(func.count(PhotoMetadata.photo_id))
                     .filter(getattr(PhotoMetadata, field).isnot(None))
                     .scalar()) or 0
            fields[field] = {
                'count': count,
                'percentage': round(count / total * 100, 1) if total else 0.0,
            }

        scored = (self.session.query(func.count(PhotoMetadata.photo_id))
                  .filter(*[getattr(PhotoMetadata, c).isnot(None) for c in SCORE_COLUMNS])
                  .scalar()) or 0
        total_cost = self.session.query(func.sum(PhotoMetadata.ai_cost)).scalar() or 0.0

        return {
            'total': total,
            'fields': fields,
            'fully_scored': scored,
            'total_cost': round(float(total_cost), 6),
        }

    def filter_options(self, cache=None) -> Dict[str, List[str]]:
        """
        Distinct non-null values per filter column.

        Args:
            cache: Optional SportfolioCache; results are kept for the layout TTL
        """
        def load():
            options = {}
            for column in FILTER_OPTION_COLUMNS:
                col = getattr(PhotoMetadata, column)
                values = (self.session.query(col).filter(col.isnot(None))
                          .distinct().order_by(asc(col)).all())
                options[column] = [v for (v,) in values]
            return options

        if cache is None:
            return load()
        return cache.get_or_load('filters', 'options', load)
