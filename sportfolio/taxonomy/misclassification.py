"""
Detection and repair of albums whose sport was wrongly set to volleyball.

Volleyball is the default sport, so albums of other sports and non-sport
events end up labelled volleyball. Album names give them away.
"""

import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Pattern

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.models import PhotoMetadata

logger = logging.getLogger(__name__)


@dataclass
class MisclassificationPattern:
    pattern: Pattern
    wrong_sport: str
    correct_sport: str
    description: str


def _rule(regex: str, correct_sport: str, description: str) -> MisclassificationPattern:
    return MisclassificationPattern(re.compile(regex, re.I), 'volleyball', correct_sport, description)


# Ordered; the first matching pattern decides an album
MISCLASSIFICATION_PATTERNS: List[MisclassificationPattern] = [
    _rule(r'basketball|bball', 'basketball', 'Basketball incorrectly marked as volleyball'),
    _rule(r'\bgolf\b', 'other', 'Golf incorrectly marked as volleyball'),
    _rule(r'tennis', 'other', 'Tennis incorrectly marked as volleyball'),
    _rule(r'bowl(ing)?', 'other', 'Bowling incorrectly marked as volleyball'),
    _rule(r'pickleball', 'other', 'Pickleball incorrectly marked as volleyball'),
    _rule(r'cross country', 'track', 'Cross Country incorrectly marked as volleyball'),
    _rule(r'graduation', 'portrait', 'Graduation events incorrectly marked as volleyball'),
    _rule(r'homecoming', 'portrait', 'Homecoming events incorrectly marked as volleyball'),
    _rule(r'birthday|party', 'portrait', 'Personal events incorrectly marked as volleyball'),
    _rule(r'drama|theatre|theater|play\b|musical', 'portrait',
          'Drama/Theatre incorrectly marked as volleyball'),
    _rule(r'signing|senior night', 'portrait',
          'Senior/Signing events incorrectly marked as volleyball'),
    _rule(r'dog|puppy|canine|pet|bruno|beni|athena', 'other',
          'Dogs/Pets incorrectly marked as volleyball'),
]


@dataclass
class MisclassifiedAlbum:
    album_key: str
    album_name: str
    primary_sport: str
    photo_count: int
    reason: str
    suggested_sport: str


def find_misclassifications(albums: List[Dict[str, Any]]) -> List[MisclassifiedAlbum]:
    """
    Match album summaries against the pattern table.

    Args:
        albums: Summary rows with album_key, album_name, primary_sport, photo_count

    Returns:
        One entry per misclassified album
    """
    found: List[MisclassifiedAlbum] = []
    for album in sorted(albums, key=lambda a: a.get('album_name') or ''):
        name = album.get('album_name') or ''
        for rule in MISCLASSIFICATION_PATTERNS:
            if album.get('primary_sport') == rule.wrong_sport and rule.pattern.search(name):
                found.append(MisclassifiedAlbum(
                    album_key=album['album_key'],
                    album_name=name,
                    primary_sport=album['primary_sport'],
                    photo_count=album.get('photo_count', 0),
                    reason=rule.description,
                    suggested_sport=rule.correct_sport,
                ))
                break
    return found


def group_by_reason(items: List[MisclassifiedAlbum]) -> Dict[str, List[MisclassifiedAlbum]]:
    grouped: Dict[str, List[MisclassifiedAlbum]] = {}
    for item in items:
        grouped.setdefault(item.reason, []).append(item)
    return grouped


def fix_misclassifications(session: Session, items: List[MisclassifiedAlbum]) -> Dict[str, Any]:
    """
    Set the suggested sport on every photo of each misclassified album.

    Commits per album. A failing album is rolled back, logged and counted.

    Returns:
        Dict with fixed, errors and photos_updated
    """
    results = {'fixed': 0, 'errors': 0, 'photos_updated': 0}

    for item in items:
        try:
            updated = (session.query(PhotoMetadata)
                       .filter(PhotoMetadata.album_key == item.album_key)
                       .update({PhotoMetadata.sport_type: item.suggested_sport},
                               synchronize_session='fetch'))
            session.commit()
            results['fixed'] += 1
            results['photos_updated'] += updated
            logger.info(f"Fixed {item.album_key} ({item.album_name}): "
                        f"{item.primary_sport} -> {item.suggested_sport}, {updated} photos")
        except SQLAlchemyError as e:
            session.rollback()
            results['errors'] += 1
            logger.error(f"Failed to fix {item.album_key}: {e}")

    return results
