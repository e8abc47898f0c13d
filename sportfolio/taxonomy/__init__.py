"""
Sport taxonomy: inference, misclassification repair and vocabulary normalization.
"""

from .inference import (
    TaxonomyInferencer, infer_sport_type, infer_photo_category, infer_action_type,
)
from .misclassification import (
    MISCLASSIFICATION_PATTERNS, MisclassifiedAlbum,
    find_misclassifications, fix_misclassifications,
)
from .normalization import (
    NORMALIZERS, normalize_emotion, normalize_composition, normalize_play_type,
    normalize_time_of_day, normalize_sport_type,
    preview_normalization, apply_normalization,
)

__all__ = [
    'TaxonomyInferencer',
    'infer_sport_type',
    'infer_photo_category',
    'infer_action_type',
    'MISCLASSIFICATION_PATTERNS',
    'MisclassifiedAlbum',
    'find_misclassifications',
    'fix_misclassifications',
    'NORMALIZERS',
    'normalize_emotion',
    'normalize_composition',
    'normalize_play_type',
    'normalize_time_of_day',
    'normalize_sport_type',
    'preview_normalization',
    'apply_normalization',
]
