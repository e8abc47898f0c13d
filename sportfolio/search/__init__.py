"""
Natural language photo search.
"""

from .query_parser import ParsedFilters, KEYWORD_MAPPINGS, EXAMPLE_QUERIES, parse_query, describe_filters

__all__ = [
    'ParsedFilters',
    'KEYWORD_MAPPINGS',
    'EXAMPLE_QUERIES',
    'parse_query',
    'describe_filters',
]
