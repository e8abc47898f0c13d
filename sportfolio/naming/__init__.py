"""
Canonical album naming and rename orchestration.
"""

from .canonical import (
    MAX_LENGTH_IDEAL, MAX_LENGTH_HARD,
    Teams, AlbumPhoto, AlbumEnrichment, SmugMugAlbumData, AlbumNameInput,
    CanonicalNameResult,
    generate_canonical_name_from_smugmug, generate_canonical_name, from_smugmug_album,
    calculate_drift_score, truncate_if_needed, validate_canonical_name,
    clean_team_name, clean_event_name, parse_existing_name, levenshtein_distance,
)
from .normalizer import AlbumNormalizer, AlbumNormalizationResult

__all__ = [
    'MAX_LENGTH_IDEAL',
    'MAX_LENGTH_HARD',
    'Teams',
    'AlbumPhoto',
    'AlbumEnrichment',
    'SmugMugAlbumData',
    'AlbumNameInput',
    'CanonicalNameResult',
    'generate_canonical_name_from_smugmug',
    'generate_canonical_name',
    'from_smugmug_album',
    'calculate_drift_score',
    'truncate_if_needed',
    'validate_canonical_name',
    'clean_team_name',
    'clean_event_name',
    'parse_existing_name',
    'levenshtein_distance',
    'AlbumNormalizer',
    'AlbumNormalizationResult',
]
