"""
Vocabulary normalization for AI-generated tag values.

Vision models drift from the canonical value sets: pipe-delimited
multi-values, hyphenated spellings and near-synonyms. Each normalizer maps a
raw value to its canonical form, or to None when it has no usable meaning.
"""

import re
import logging
from collections import Counter
from typing import Callable, Dict, List, Optional, Any

from sqlalchemy.orm import Session

from ..db.models import PhotoMetadata, EMOTIONS, COMPOSITIONS, SPORT_TYPES, PLAY_TYPES_BY_SPORT

logger = logging.getLogger(__name__)

# First canonical emotion found in a pipe-delimited value
_PIPE_EMOTION_ORDER = [
    ('focus', 'focus'),
    ('determination', 'determination'),
    ('intensity', 'intensity'),
    ('excitement', 'excitement'),
    ('triumph', 'triumph'),
    ('serenity', 'serenity'),
    ('playfulness', 'excitement'),
]

_EMOTION_SYNONYMS = {}
for _target, _values in (
    ('excitement', ('joy', 'happiness', 'playfulness', 'enthusiasm', 'vibrancy')),
    ('focus', ('concentration', 'anticipation', 'curiosity', 'contemplation')),
    ('triumph', ('pride', 'satisfaction', 'confidence', 'fulfillment')),
    ('serenity', ('contentment', 'appreciation', 'gratitude', 'fondness')),
    ('determination', ('unity', 'camaraderie', 'respect', 'affection', 'community', 'dedication')),
    (None, ('distress', 'anxiety', 'neglect', 'solemnity', 'mysterious', 'mystery')),
    (None, ('documentation', 'informational', 'candid', 'dramatic', 'raw', 'action', 'interest')),
    ('intensity', ('awe', 'intrigue')),
):
    for _value in _values:
        _EMOTION_SYNONYMS[_value] = _target

_CENTERED_VARIANTS = ('centered', 'center_focus', 'center_weighted', 'centered_subject',
                      'central_focus', 'central_framing', 'centralized')

_COMPOSITION_DEFAULTS = {
    'close_up': 'centered',
    'dramatic_angle': 'rule_of_thirds',
    'motion_blur': 'leading_lines',
    'wide_angle': 'rule_of_thirds',
}

# Remaps for values the first, volleyball-only enrichment pass invented.
# Only applied to volleyball rows; other sports keep their own vocabulary.
_VOLLEYBALL_PLAY_TYPE_MAP = {
    'action': 'attack',
    'play': 'attack',
    'swing': 'attack',
    'joust': 'block',
    'defense': 'dig',
    'roll': 'dig',
}
for _value in ('timeout', 'cutback', 'kick', 'tackle', 'transition', 'celebration'):
    _VOLLEYBALL_PLAY_TYPE_MAP[_value] = None

# Fields whose normalizer also takes the row's sport_type
SPORT_AWARE_FIELDS = ('play_type',)

_TIME_OF_DAY_MAP = {
    'afternoon': 'evening',
    'golden-hour': 'golden_hour',
    'morning': 'dawn',
}
for _value in ('mid-game', 'mid-action', 'game-time', 'game-break', 'in-game', 'action-shot',
               'game-action', 'game-play', 'day', 'daytime', 'game'):
    _TIME_OF_DAY_MAP[_value] = 'midday'
for _value in ('late-afternoon', 'pre-game', 'action', 'training'):
    _TIME_OF_DAY_MAP[_value] = 'evening'

# (substring, sport); first match wins
_SPORT_SUBSTRINGS = [
    (('volley',), 'volleyball'),
    (('basket',), 'basketball'),
    (('soccer', 'futbol'), 'soccer'),
    (('soft',), 'softball'),
    (('foot',), 'football'),
    (('base',), 'baseball'),
    (('track', 'field'), 'track'),
    (('portrait', 'headshot'), 'portrait'),
]


def normalize_emotion(value: Optional[str]) -> Optional[str]:
    """Map a raw emotion to one of the six canonical emotions, or None."""
    if value is None:
        return None

    if '|' in value:
        for needle, target in _PIPE_EMOTION_ORDER:
            if needle in value:
                return target
        return value

    if value in EMOTIONS:
        return value
    return _EMOTION_SYNONYMS.get(value, value)


def normalize_composition(value: Optional[str]) -> Optional[str]:
    """
    Map a raw composition to the canonical set.

    Takes the first of pipe-delimited values and converts hyphens to
    underscores. Non-composition descriptors fall back to a default
    composition; anything unrecognized becomes None.
    """
    if not value:
        return None

    normalized = value.split('|')[0].replace('-', '_')

    if re.search(r'rule.*third', normalized):
        result = 'rule_of_thirds'
    elif re.search(r'leading.*line', normalized):
        result = 'leading_lines'
    elif normalized in _CENTERED_VARIANTS:
        result = 'centered'
    elif normalized == 'symmetry':
        result = 'symmetry'
    elif (re.search(r'frame.*frame', normalized) or 'framing' in normalized
          or normalized == 'natural_framing'):
        result = 'frame_within_frame'
    elif normalized in _COMPOSITION_DEFAULTS:
        result = _COMPOSITION_DEFAULTS[normalized]
    elif 'shallow' in normalized or re.search(r'depth.*field', normalized):
        result = 'centered'
    else:
        return None

    return result if result in COMPOSITIONS else None


def normalize_play_type(value: Optional[str], sport: Optional[str] = None) -> Optional[str]:
    """
    Map a raw play type for a photo of `sport`.

    Values canonical for the sport are kept. The volleyball remaps only
    apply to volleyball photos; for any other sport, or an unknown one,
    the value is left as written.
    """
    if value is None or value == 'null':
        return None
    if value in PLAY_TYPES_BY_SPORT.get(sport, ()):
        return value
    if sport == 'volleyball':
        return _VOLLEYBALL_PLAY_TYPE_MAP.get(value, value)
    return value


def normalize_time_of_day(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return _TIME_OF_DAY_MAP.get(value, value)


def normalize_sport_type(value: Optional[str]) -> Optional[str]:
    """Repair misspelled sports; unrecognized values become None for review."""
    if value is None or value in SPORT_TYPES:
        return value

    lowered = value.lower()
    for needles, sport in _SPORT_SUBSTRINGS:
        if any(n in lowered for n in needles):
            return sport
    return None


NORMALIZERS: Dict[str, Callable[..., Optional[str]]] = {
    'emotion': normalize_emotion,
    'composition': normalize_composition,
    'play_type': normalize_play_type,
    'time_of_day': normalize_time_of_day,
    'sport_type': normalize_sport_type,
}


def _normalizer_for(field: str) -> Callable[..., Optional[str]]:
    if field not in NORMALIZERS:
        raise ValueError(f"No normalizer for field '{field}'. "
                         f"Choose from: {', '.join(sorted(NORMALIZERS))}")
    return NORMALIZERS[field]


def preview_normalization(session: Session, field: str) -> List[Dict[str, Any]]:
    """
    Show what normalizing a column would change.

    Play types are grouped per sport_type, since the same value can be
    canonical for one sport and drift for another.

    Returns:
        List of {'original', 'normalized', 'count'} for values that change,
        most frequent first. Sport-aware fields add 'sport_type'.
    """
    normalizer = _normalizer_for(field)
    column = getattr(PhotoMetadata, field)

    if field not in SPORT_AWARE_FIELDS:
        values = Counter(v for (v,) in session.query(column).filter(column.isnot(None)).all())
        changes = []
        for original, count in values.most_common():
            normalized = normalizer(original)
            if normalized != original:
                changes.append({'original': original, 'normalized': normalized, 'count': count})
        return changes

    rows = session.query(column, PhotoMetadata.sport_type).filter(column.isnot(None)).all()
    changes = []
    for (original, sport), count in Counter((v, s) for v, s in rows).most_common():
        normalized = normalizer(original, sport)
        if normalized != original:
            changes.append({'original': original, 'normalized': normalized,
                            'count': count, 'sport_type': sport})
    return changes


def apply_normalization(session: Session, field: str) -> int:
    """
    Normalize a column in place.

    Returns:
        Number of rows changed
    """
    changed = 0
    column = getattr(PhotoMetadata, field)
    for change in preview_normalization(session, field):
        query = session.query(PhotoMetadata).filter(column == change['original'])
        if 'sport_type' in change:
            sport = change['sport_type']
            query = query.filter(PhotoMetadata.sport_type.is_(None) if sport is None
                                 else PhotoMetadata.sport_type == sport)
        changed += query.update({column: change['normalized']}, synchronize_session='fetch')
        logger.debug(f"{field}: {change['original']!r} -> {change['normalized']!r} "
                     f"({change['count']} rows)")

    session.flush()
    logger.info(f"Normalized {changed} {field} values")
    return changed
