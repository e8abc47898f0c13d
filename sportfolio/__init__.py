"""
Sportfolio: metadata toolchain for a sports photography portfolio

Keeps the `photo_metadata` table of a ~20,000 photo SmugMug-backed portfolio
in shape: AI enrichment backfills, sport taxonomy inference, vocabulary
normalization, canonical album naming and story collection curation.
"""

__version__ = "0.1.0"

# Core imports for easy access
from .config import load_config

__all__ = [
    "load_config",
]
