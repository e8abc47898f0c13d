"""
Sport taxonomy inference.

Fills `sport_type`, `photo_category` and `action_type` from play type,
keywords, album name and intensity. Rules are applied in priority order and
only ever touch NULL fields, so re-running is a no-op.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..db.models import PhotoMetadata, VOLLEYBALL_PLAY_TYPES

logger = logging.getLogger(__name__)

DEFAULT_SPORT = 'volleyball'

# (keywords, sport); first match wins
KEYWORD_SPORT_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (('volleyball',), 'volleyball'),
    (('basketball',), 'basketball'),
    (('soccer', 'football'), 'soccer'),
    (('baseball',), 'baseball'),
    (('track', 'track-and-field'), 'track'),
    (('portrait', 'senior', 'headshot'), 'portrait'),
    (('candid',), 'candid'),
]

# (album name substrings, sport); first match wins
ALBUM_NAME_SPORT_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (('volleyball',), 'volleyball'),
    (('basketball',), 'basketball'),
    (('soccer',), 'soccer'),
    (('baseball',), 'baseball'),
    (('track',), 'track'),
    (('portrait', 'senior'), 'portrait'),
]

PORTRAIT_KEYWORDS = ('portrait', 'senior', 'headshot')

INFERENCE_STEPS = (
    'sport_from_play_type',
    'sport_from_keywords',
    'sport_from_album_name',
    'sport_default',
    'photo_category',
    'action_type',
)


def _keywords(photo) -> List[str]:
    return [str(k).lower() for k in (photo.keywords or [])]


def sport_from_play_type(photo) -> Optional[str]:
    if photo.play_type in VOLLEYBALL_PLAY_TYPES:
        return 'volleyball'
    return None


def sport_from_keywords(photo) -> Optional[str]:
    keywords = _keywords(photo)
    for candidates, sport in KEYWORD_SPORT_RULES:
        if any(k in keywords for k in candidates):
            return sport
    return None


def sport_from_album_name(photo) -> Optional[str]:
    name = (photo.album_name or '').lower()
    for candidates, sport in ALBUM_NAME_SPORT_RULES:
        if any(c in name for c in candidates):
            return sport
    return None


def infer_sport_type(photo) -> Tuple[str, str]:
    """
    Infer a photo's sport.

    Returns:
        Tuple of (sport, step name that decided it)
    """
    for step, rule in (('sport_from_play_type', sport_from_play_type),
                       ('sport_from_keywords', sport_from_keywords),
                       ('sport_from_album_name', sport_from_album_name)):
        sport = rule(photo)
        if sport:
            return sport, step
    return DEFAULT_SPORT, 'sport_default'


def infer_photo_category(photo) -> str:
    """
    Infer a photo's category from intensity, play type, keywords and titles.
    """
    intensity = photo.action_intensity
    play_type = photo.play_type

    if intensity in ('high', 'peak') and play_type is not None:
        return 'action'
    if play_type == 'celebration' or photo.emotion == 'triumph':
        return 'celebration'
    if intensity == 'low' or play_type == 'timeout':
        return 'candid'
    if any(k in PORTRAIT_KEYWORDS for k in _keywords(photo)):
        return 'portrait'

    title = (photo.title or '').lower()
    album_name = (photo.album_name or '').lower()
    if 'warmup' in title or 'practice' in title or 'warmup' in album_name:
        return 'warmup'
    if intensity in ('medium', 'high', 'peak'):
        return 'action'
    return 'candid'


def infer_action_type(photo) -> Optional[str]:
    """Sport-specific action: the play type, except for non-action categories."""
    if photo.sport_type == 'volleyball' and photo.play_type is not None:
        return photo.play_type
    if photo.photo_category in ('portrait', 'candid', 'ceremony'):
        return None
    return photo.play_type


class TaxonomyInferencer:
    """Applies the inference rules to photos in the database."""

    def __init__(self, session: Session):
        self.session = session

    def run(self, dry_run: bool = False) -> Dict[str, int]:
        """
        Fill NULL taxonomy fields.

        Args:
            dry_run: Count changes, then roll them back

        Returns:
            Rows changed per step, in step order
        """
        counts = {step: 0 for step in INFERENCE_STEPS}

        unsorted = (self.session.query(PhotoMetadata)
                    .filter(PhotoMetadata.sport_type.is_(None)).all())
        for photo in unsorted:
            sport, step = infer_sport_type(photo)
            photo.sport_type = sport
            counts[step] += 1

        uncategorized = (self.session.query(PhotoMetadata)
                         .filter(PhotoMetadata.photo_category.is_(None)).all())
        for photo in uncategorized:
            photo.photo_category = infer_photo_category(photo)
            counts['photo_category'] += 1

        missing_action = (self.session.query(PhotoMetadata)
                          .filter(PhotoMetadata.action_type.is_(None),
                                  PhotoMetadata.play_type.isnot(None)).all())
        for photo in missing_action:
            action_type = infer_action_type(photo)
            if action_type is not None:
                photo.action_type = action_type
                counts['action_type'] += 1

        if dry_run:
            self.session.rollback()
            logger.info(f"Taxonomy inference dry run: {counts}")
        else:
            self.session.flush()
            logger.info(f"Taxonomy inference applied: {counts}")

        return counts

    def coverage(self) -> Dict[str, Any]:
        """Non-null counts for the taxonomy columns."""
        total = self.session.query(PhotoMetadata).count()
        result: Dict[str, Any] = {'total': total}
        for column in ('sport_type', 'photo_category', 'action_type'):
            result[column] = (self.session.query(PhotoMetadata)
                              .filter(getattr(PhotoMetadata, column).isnot(None)).count())
        return result
