"""
Story collection curation.

A collection is a narrative filter (emotion, game moment, light) combined
with a quality floor on the AI scores. Only enriched photos (sharpness set)
are eligible; results are ordered by one score column, best first.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.models import PhotoMetadata

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 24


@dataclass
class CollectionDefinition:
    slug: str
    title: str
    narrative: str
    description: str
    filters: Dict[str, Any] = field(default_factory=dict)
    min_scores: Dict[str, float] = field(default_factory=dict)
    sort_by: Optional[str] = None
    limit: int = DEFAULT_LIMIT


@dataclass
class CollectionResult:
    collection: CollectionDefinition
    photos: List[PhotoMetadata]
    total: int
    avg_sharpness: float
    avg_emotional_impact: float
    avg_composition: float

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def stats(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'avg_sharpness': self.avg_sharpness,
            'avg_emotional_impact': self.avg_emotional_impact,
            'avg_composition': self.avg_composition,
        }


COLLECTIONS: List[CollectionDefinition] = [
    CollectionDefinition(
        slug='portfolio-excellence',
        title='Portfolio Excellence',
        narrative='The absolute best: technical mastery meets emotional impact',
        description='Triple-excellent photography: sharpness, composition and emotional '
                    'impact all score 9/10 or higher.',
        min_scores={'sharpness': 9, 'composition_score': 9, 'emotional_impact': 9},
        sort_by='sharpness',
        limit=48,
    ),
    CollectionDefinition(
        slug='comeback-stories',
        title='Comeback Stories',
        narrative='Critical moments of triumph in the final minutes',
        description='Dramatic comebacks and clutch performances in the closing moments '
                    'of competition.',
        filters={'emotion': 'triumph', 'time_in_game': 'final_5_min'},
        min_scores={'emotional_impact': 7, 'sharpness': 7, 'composition_score': 7},
        sort_by='emotional_impact',
    ),
    CollectionDefinition(
        slug='peak-intensity',
        title='Peak Intensity',
        narrative='The most intense moments of gameplay',
        description='Maximum effort and maximum focus: the moments when everything is on '
                    'the line.',
        filters={'action_intensity': 'peak'},
        min_scores={'emotional_impact': 8, 'sharpness': 7, 'composition_score': 7},
        sort_by='emotional_impact',
    ),
    CollectionDefinition(
        slug='golden-hour-magic',
        title='Golden Hour Magic',
        narrative='Stunning captures during the magic hour',
        description='The warm glow of golden hour meets technical excellence.',
        filters={'time_of_day': 'golden_hour'},
        min_scores={'composition_score': 7, 'sharpness': 7},
        sort_by='composition_score',
    ),
    CollectionDefinition(
        slug='focus-and-determination',
        title='Focus & Determination',
        narrative='Unwavering concentration and relentless drive',
        description='Athletes in moments of pure focus, where mental strength is as '
                    'visible as physical prowess.',
        filters={'emotion': 'determination'},
        min_scores={'sharpness': 8, 'composition_score': 7, 'emotional_impact': 7},
        sort_by='sharpness',
    ),
    CollectionDefinition(
        slug='victory-celebrations',
        title='Victory Celebrations',
        narrative='Pure joy and shared triumph',
        description='The moments after victory: unfiltered emotion and team unity.',
        filters={'photo_category': 'celebration'},
        min_scores={'emotional_impact': 7, 'sharpness': 7, 'composition_score': 7},
        sort_by='emotional_impact',
    ),
]

COLLECTIONS_BY_SLUG = {c.slug: c for c in COLLECTIONS}


def get_collection(slug: str) -> CollectionDefinition:
    if slug not in COLLECTIONS_BY_SLUG:
        raise ValueError(f"Unknown collection: {slug}")
    return COLLECTIONS_BY_SLUG[slug]


def _average(photos: List[PhotoMetadata], column: str) -> float:
    # NULL counts as 0
    if not photos:
        return 0.0
    total = sum(getattr(p, column) or 0 for p in photos)
    return round(total / len(photos), 1)


def build_collection_query(session: Session, definition: CollectionDefinition):
    query = session.query(PhotoMetadata).filter(PhotoMetadata.sharpness.isnot(None))

    for column, value in definition.filters.items():
        attr = getattr(PhotoMetadata, column)
        if isinstance(value, (list, tuple)):
            query = query.filter(attr.in_(value))
        else:
            query = query.filter(attr == value)

    for column, minimum in definition.min_scores.items():
        query = query.filter(getattr(PhotoMetadata, column) >= minimum)

    if definition.sort_by:
        query = query.order_by(desc(getattr(PhotoMetadata, definition.sort_by)),
                               PhotoMetadata.photo_id)

    return query.limit(definition.limit or DEFAULT_LIMIT)


def generate_collection(session: Session, definition: CollectionDefinition) -> CollectionResult:
    """
    Select the photos of one collection.

    Args:
        session: Database session
        definition: Collection to generate

    Returns:
        CollectionResult with photos and averages rounded to one decimal
    """
    photos = build_collection_query(session, definition).all()

    result = CollectionResult(
        collection=definition,
        photos=photos,
        total=len(photos),
        avg_sharpness=_average(photos, 'sharpness'),
        avg_emotional_impact=_average(photos, 'emotional_impact'),
        avg_composition=_average(photos, 'composition_score'),
    )
    logger.info(f"{definition.title}: {result.total} photos "
                f"(sharpness {result.avg_sharpness}, impact {result.avg_emotional_impact}, "
                f"composition {result.avg_composition})")
    return result


def generate_all(session: Session,
                 definitions: Optional[List[CollectionDefinition]] = None) -> List[CollectionResult]:
    """Generate every collection, skipping (and logging) any that fails."""
    results = []
    for definition in definitions or COLLECTIONS:
        try:
            results.append(generate_collection(session, definition))
        except SQLAlchemyError as e:
            logger.error(f"Failed to generate collection {definition.slug}: {e}")
    return results


def assign_collection(session: Session, result: CollectionResult) -> int:
    """
    Tag the photos of a generated collection with its slug.

    Returns:
        Number of photos tagged
    """
    for photo in result.photos:
        photo.collection_slug = result.collection.slug
    session.flush()
    logger.info(f"Assigned {len(result.photos)} photos to {result.collection.slug}")
    return len(result.photos)
