"""
Natural language search query parser.

Converts free-text queries into photo filters, e.g.
"block at golden hour" -> play_type="block", time_of_day="golden_hour",
color_temperature="warm".
"""

import re
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


@dataclass
class ParsedFilters:
    sport: Optional[str] = None
    category: Optional[str] = None
    play_type: Optional[str] = None
    action_intensity: Optional[str] = None
    lighting: List[str] = field(default_factory=list)
    color_temperature: Optional[str] = None
    time_of_day: Optional[str] = None
    composition: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def to_dict(self) -> Dict[str, Any]:
        """Set filters only, keyed the way PhotoOperations.search expects."""
        return {k: v for k, v in asdict(self).items() if v}


# filter -> value -> keywords; within a filter a later match overrides an earlier one
KEYWORD_MAPPINGS: Dict[str, Dict[str, List[str]]] = {
    'sport': {
        'volleyball': ['volleyball', 'vball', 'volley'],
        'basketball': ['basketball', 'bball', 'hoops'],
        'soccer': ['soccer', 'football'],
        'football': ['football', 'american football'],
    },
    'category': {
        'action': ['action', 'gameplay', 'playing', 'game'],
        'celebration': ['celebration', 'celebrate', 'celebrating', 'victory', 'win', 'won'],
        'candid': ['candid', 'portrait', 'closeup', 'close-up', 'face'],
    },
    'play_type': {
        'attack': ['attack', 'attacking', 'spike', 'spiking', 'hit', 'hitting', 'kill'],
        'block': ['block', 'blocking', 'blocker'],
        'dig': ['dig', 'digging', 'defense', 'defensive'],
        'set': ['set', 'setting', 'setter', 'assist'],
        'serve': ['serve', 'serving', 'server', 'service'],
        'celebration': ['celebration', 'celebrate'],
    },
    'action_intensity': {
        'low': ['low', 'calm', 'relaxed', 'slow'],
        'medium': ['medium', 'moderate'],
        'high': ['high', 'intense', 'fast', 'quick'],
        'peak': ['peak', 'maximum', 'extreme', 'highest', 'critical', 'crucial'],
    },
    'lighting': {
        'natural': ['natural', 'sunlight', 'daylight', 'outdoor'],
        'backlit': ['backlit', 'backlight', 'silhouette'],
        'dramatic': ['dramatic', 'strong', 'harsh'],
        'soft': ['soft', 'gentle', 'diffused'],
        'artificial': ['artificial', 'indoor', 'gym', 'arena', 'stadium'],
    },
    'color_temperature': {
        'warm': ['warm', 'orange', 'golden', 'sunset'],
        'cool': ['cool', 'blue', 'cold'],
        'neutral': ['neutral', 'balanced', 'normal'],
    },
    'time_of_day': {
        'morning': ['morning', 'dawn', 'sunrise', 'early'],
        'afternoon': ['afternoon', 'midday', 'noon'],
        'evening': ['evening', 'dusk', 'sunset'],
        'golden_hour': ['golden hour', 'magic hour', 'golden', 'magic'],
        'night': ['night', 'nighttime', 'dark'],
    },
    'composition': {
        'rule_of_thirds': ['rule of thirds', 'thirds'],
        'leading_lines': ['leading lines', 'lines'],
        'centered': ['centered', 'center', 'central'],
        'symmetry': ['symmetry', 'symmetric', 'symmetrical'],
        'frame_within_frame': ['frame within frame', 'framed', 'framing'],
    },
}

# Filters that collect every matching value
MULTI_VALUE_FILTERS = ('lighting',)

EXAMPLE_QUERIES = [
    'block at golden hour',
    'attack with dramatic lighting',
    'celebration photos',
    'peak intensity action',
    'serve in natural light',
    'dig defense warm colors',
    'set with soft lighting',
    'volleyball at sunset',
    'basketball celebration',
]

_KEYWORD_PATTERNS = {
    keyword: re.compile(r'\b' + re.escape(keyword) + r'\b', re.IGNORECASE)
    for mappings in KEYWORD_MAPPINGS.values()
    for keywords in mappings.values()
    for keyword in keywords
}


def _matches(keyword: str, text: str) -> bool:
    return bool(_KEYWORD_PATTERNS[keyword].search(text))


def parse_query(query: str) -> ParsedFilters:
    """
    Parse a natural language query into filters.

    Args:
        query: Free-text search string

    Returns:
        ParsedFilters; empty for queries shorter than two characters
    """
    filters = ParsedFilters()
    text = (query or '').lower().strip()

    if len(text) < MIN_QUERY_LENGTH:
        return filters

    for filter_type, mappings in KEYWORD_MAPPINGS.items():
        for value, keywords in mappings.items():
            if not any(_matches(keyword, text) for keyword in keywords):
                continue
            if filter_type in MULTI_VALUE_FILTERS:
                getattr(filters, filter_type).append(value)
            else:
                setattr(filters, filter_type, value)

    logger.debug(f"Parsed query '{query}' to filters: {filters.to_dict()}")
    return filters


def describe_filters(filters: ParsedFilters) -> str:
    """Human-readable summary, e.g. 'block, golden hour, dramatic lighting'."""
    parts = []

    if filters.sport:
        parts.append(filters.sport)
    if filters.play_type:
        parts.append(filters.play_type)
    if filters.action_intensity:
        parts.append(f"{filters.action_intensity} intensity")
    if filters.category:
        parts.append(filters.category)
    if filters.time_of_day:
        parts.append(filters.time_of_day.replace('_', ' ', 1))
    if filters.lighting:
        parts.append(f"{'/'.join(filters.lighting)} lighting")
    if filters.color_temperature:
        parts.append(f"{filters.color_temperature} colors")
    if filters.composition:
        parts.append(filters.composition.replace('_', ' '))

    return ', '.join(parts)
