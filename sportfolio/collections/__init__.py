"""
Story collections curated from AI metadata.
"""

from .curation import (
    CollectionDefinition, CollectionResult, COLLECTIONS, COLLECTIONS_BY_SLUG,
    get_collection, build_collection_query, generate_collection, generate_all,
    assign_collection,
)

__all__ = [
    'CollectionDefinition',
    'CollectionResult',
    'COLLECTIONS',
    'COLLECTIONS_BY_SLUG',
    'get_collection',
    'build_collection_query',
    'generate_collection',
    'generate_all',
    'assign_collection',
]
