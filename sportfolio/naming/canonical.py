"""
Canonical album naming for Sportfolio.

Builds short, scannable album names of the form "[Event or Teams] - [Date]"
from SmugMug album data and photo EXIF dates, and scores how far a proposed
name drifts from the album's current name.

Single-day albums get "May 30"; multi-day albums get "May 2024".
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple, Any

logger = logging.getLogger(__name__)

MAX_LENGTH_IDEAL = 35  # one line when scanning
MAX_LENGTH_HARD = 45   # two lines on mobile

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

DATE_SOURCES = ('exif', 'album_field', 'inferred', 'fallback')

SPORT_KEYWORDS = ['volleyball', 'basketball', 'soccer', 'football']

REDUNDANT_PREFIXES = ['HS VB', 'College VB', 'Volleyball -', 'Basketball -']

_TEAM_LEVEL_PREFIX = re.compile(r"^(hs|ms|college|men's|women's|boys|girls|pro)\s+", re.I)
_TEAM_SPORT_SUFFIX = re.compile(
    r"\s+(volleyball|vb|basketball|soccer|football|baseball|softball|track)\s*$", re.I)

_EVENT_CLEANUPS = [
    (re.compile(r"^\d{4}\s*[-–]?\s*"), ''),                                   # leading year
    (re.compile(r"\s*[-–]\s*\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\s*$"), ''),        # trailing M/D/YY
    (re.compile(r"\s*[-–]\s*\d{4}-\d{2}-\d{2}\s*$"), ''),                    # trailing ISO date
    (re.compile(r"\s*[-–]?\s*\d{4}\s*$"), ''),                               # trailing year
    (re.compile(r"\s+\d{1,2}-\d{1,2}-\d{2,4}\s*$", re.I), ''),               # " 09-12-2022"
    (re.compile(r"\s+\d{1,2}-\d{1,2}\s*$", re.I), ''),                       # " 09-12"
    (re.compile(r"^\s*(hs|ms|college|men's|women's)\s+", re.I), ''),
    (re.compile(r"^\s*(volleyball|vb|basketball|soccer|football|baseball|softball|track)\s+", re.I), ''),
]

_EVENT_ABBREVIATIONS = [
    (re.compile(r"\bchampionship\b", re.I), 'Champ'),
    (re.compile(r"\binvitational\b", re.I), 'Invite'),
    (re.compile(r"\btournament\b", re.I), 'Tourney'),
    (re.compile(r"\bpicture day\b", re.I), ''),
]

_TRAILING_PHOTOS = re.compile(r"\s+photos?\s*$", re.I)

_NAME_LEVEL_PREFIX = _TEAM_LEVEL_PREFIX
_NAME_SPORT_PREFIX = re.compile(
    r"^(vb|volleyball|basketball|soccer|football|baseball|softball|track)\s+[-–]?\s*", re.I)
_MATCHUP = re.compile(r"(.+?)\s+vs\.?\s+(.+?)(?:\s+[-–]\s+|\s+\d{4}|$)", re.I)

_EXIF_DATE = re.compile(r"^(\d{4})[-:](\d{2})[-:](\d{2})")
_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_US_DATE = re.compile(r"(\d{2})-(\d{2})-(\d{4})")
_YEAR = re.compile(r"\b(20\d{2})\b")

_DRIFT_PREFIX = re.compile(r"^(hs|ms|college|men's|women's|pro|vb|volleyball|basketball)\s", re.I)
_MONTH_YEAR = re.compile(r"(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\s+\d{4}", re.I)


@dataclass
class Teams:
    home: str
    away: str


@dataclass
class AlbumPhoto:
    """One photo as seen by the namer: EXIF plus loose text."""
    exif: Dict[str, Any] = field(default_factory=dict)
    keywords: List[str] = field(default_factory=list)
    caption: Optional[str] = None


@dataclass
class AlbumEnrichment:
    """AI-derived album facts, when available."""
    sport_type: Optional[str] = None
    teams: Optional[Teams] = None
    event_name: Optional[str] = None
    category: Optional[str] = None


@dataclass
class SmugMugAlbumData:
    """
    SmugMug album as input to canonical naming.

    `name` is the existing name; it is only parsed when no enrichment is
    available and is always the baseline for drift scoring.
    """
    album_key: str
    name: str
    date_start: Optional[str] = None
    date_end: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    description: Optional[str] = None
    photos: List[AlbumPhoto] = field(default_factory=list)
    enrichment: Optional[AlbumEnrichment] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SmugMugAlbumData':
        """Build from the camelCase album JSON export (albumKey, dateStart, ...)."""
        enrichment = None
        raw = data.get('enrichment')
        if raw:
            teams = raw.get('teams')
            enrichment = AlbumEnrichment(
                sport_type=raw.get('sportType'),
                teams=Teams(teams['home'], teams['away']) if teams else None,
                event_name=raw.get('eventName'),
                category=raw.get('category'),
            )

        return cls(
            album_key=data.get('albumKey') or '',
            name=data.get('name') or '',
            date_start=data.get('dateStart'),
            date_end=data.get('dateEnd'),
            keywords=data.get('keywords') or [],
            description=data.get('description'),
            photos=[
                AlbumPhoto(exif=p.get('exif') or {}, keywords=p.get('keywords') or [],
                           caption=p.get('caption'))
                for p in data.get('photos') or []
            ],
            enrichment=enrichment,
        )


@dataclass
class AlbumNameInput:
    """Input for the legacy naming path."""
    current_name: Optional[str] = None
    sport_type: Optional[str] = None
    earliest_photo_date: Optional[str] = None
    latest_photo_date: Optional[str] = None
    teams: Optional[Teams] = None
    event_name: Optional[str] = None


@dataclass
class CanonicalNameResult:
    name: str
    length: int
    truncated: bool
    components: Dict[str, str]
    metadata: Dict[str, Any]
    drift_score: Optional[int] = None
    drift_analysis: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'length': self.length,
            'truncated': self.truncated,
            'components': dict(self.components),
            'metadata': dict(self.metadata),
            'drift_score': self.drift_score,
            'drift_analysis': self.drift_analysis,
        }


def clean_team_name(team: str) -> str:
    """Strip level prefixes ("HS ") and trailing sport words from a team name."""
    cleaned = _TEAM_LEVEL_PREFIX.sub('', team.strip(), count=1)
    cleaned = _TEAM_SPORT_SUFFIX.sub('', cleaned, count=1)
    return cleaned.strip()


def clean_event_name(event: str, sport: Optional[str] = None) -> str:
    """
    Reduce an event name to its distinctive words.

    Drops years, dates, level and sport prefixes, abbreviates verbose
    event words and removes "Picture Day" and a trailing "photos".
    """
    cleaned = event.strip()
    for pattern, replacement in _EVENT_CLEANUPS:
        cleaned = pattern.sub(replacement, cleaned, count=1)
    cleaned = re.sub(r"\s{2,}", ' ', cleaned).strip()

    for pattern, replacement in _EVENT_ABBREVIATIONS:
        cleaned = pattern.sub(replacement, cleaned)
    cleaned = _TRAILING_PHOTOS.sub('', cleaned, count=1)

    return cleaned.strip()


def parse_existing_name(name: str) -> Dict[str, Any]:
    """
    Pull a matchup or event out of an existing album name.

    Returns:
        {'teams': Teams} for matchups, {'event': str} for events, {} otherwise
    """
    cleaned = _NAME_LEVEL_PREFIX.sub('', name, count=1)
    cleaned = _NAME_SPORT_PREFIX.sub('', cleaned, count=1).strip()

    match = _MATCHUP.search(cleaned)
    if match:
        return {'teams': Teams(home=clean_team_name(match.group(1)),
                               away=clean_team_name(match.group(2)))}

    event = clean_event_name(cleaned)
    if len(event) > 3:
        return {'event': event}

    return {}


def normalize_exif_date(exif_date: Optional[str]) -> Optional[str]:
    """'2025:05:30 18:15:23' or '2025-05-30T..' -> '2025-05-30'; None if unrecognized."""
    if not exif_date or not isinstance(exif_date, str):
        return None
    match = _EXIF_DATE.match(exif_date)
    if not match:
        return None
    return f"{match.group(1)}-{match.group(2)}-{match.group(3)}"


def infer_date_from_name(name: str) -> Optional[str]:
    """
    Guess an ISO date from an album name.

    Tries ISO, then US MM-DD-YYYY, then a bare 20xx year (January 1st).
    """
    iso = _ISO_DATE.search(name)
    if iso:
        return iso.group(0)

    us = _US_DATE.search(name)
    if us:
        return f"{us.group(3)}-{us.group(1)}-{us.group(2)}"

    year = _YEAR.search(name)
    if year:
        return f"{year.group(1)}-01-01"

    return None


def format_canonical_date(earliest: Optional[str], latest: Optional[str]) -> str:
    """
    Format the album date from ISO strings.

    Returns:
        "Mon D" when earliest == latest, "Mon YYYY" otherwise, '' without a date
    """
    if not latest:
        return ''

    try:
        year, month, day = (int(part) for part in latest[:10].split('-'))
        parsed = date(year, month, day)
    except ValueError:
        logger.debug(f"Unparseable album date: {latest}")
        return ''

    month_name = MONTH_NAMES[parsed.month - 1]
    if earliest == latest:
        return f"{month_name} {parsed.day}"
    return f"{month_name} {parsed.year}"


def extract_date_range(album: SmugMugAlbumData) -> Tuple[Optional[str], Optional[str], str]:
    """
    Find the album's date range.

    Priority: photo EXIF DateTimeOriginal > album date_start/date_end >
    date inferred from the existing name.

    Returns:
        Tuple of (earliest, latest, source)
    """
    exif_dates = sorted(
        d for d in (normalize_exif_date((p.exif or {}).get('DateTimeOriginal'))
                    for p in album.photos or [])
        if d
    )
    if exif_dates:
        return exif_dates[0], exif_dates[-1], 'exif'

    if album.date_start or album.date_end:
        start = normalize_exif_date(album.date_start) or album.date_start
        end = normalize_exif_date(album.date_end) or album.date_end
        return start, end or start, 'album_field'

    inferred = infer_date_from_name(album.name or '')
    if inferred:
        return inferred, inferred, 'inferred'

    return None, None, 'fallback'


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def calculate_drift_score(existing_name: str, proposed_name: str) -> Tuple[int, List[str]]:
    """
    Score how different a proposed name is from the existing one.

    Args:
        existing_name: Current album name
        proposed_name: Canonical name

    Returns:
        Tuple of (score 0-100, human-readable changes)
    """
    existing = existing_name.lower().strip()
    proposed = proposed_name.lower().strip()

    if existing == proposed:
        return 0, []

    changes: List[str] = []
    score = 0.0
    max_len = max(len(existing), len(proposed))

    length_diff = abs(len(existing) - len(proposed))
    score += length_diff / max_len * 20
    if length_diff > 10:
        changes.append(f"Length changed by {length_diff} characters")

    if _DRIFT_PREFIX.search(existing) and not _DRIFT_PREFIX.search(proposed):
        score += 15
        changes.append('Removed sport/level prefix')

    if _ISO_DATE.search(existing) and not _ISO_DATE.search(proposed):
        score += 10
        changes.append('Date format changed from ISO to readable')

    if _YEAR.search(existing) and _MONTH_YEAR.search(proposed):
        score += 5
        changes.append('Date format enhanced with month')

    similarity = 1 - levenshtein_distance(existing, proposed) / max_len
    score += (1 - similarity) * 40
    if similarity < 0.7:
        changes.append('Significant text changes detected')

    if ' vs ' in existing and ' vs ' in proposed:
        score -= 10
        changes.append('Matchup structure preserved')

    score = min(100.0, max(0.0, score))
    # round half up
    return int(score + 0.5), changes


def truncate_if_needed(name: str, max_length: int = MAX_LENGTH_HARD) -> Tuple[str, bool]:
    """
    Shorten a name to max_length, keeping the date part when possible.

    Returns:
        Tuple of (name, truncated)
    """
    if len(name) <= max_length:
        return name, False

    parts = name.split(' - ')
    if len(parts) <= 1:
        return name[:max_length - 3] + '...', True

    date_part = parts[-1]
    available = max_length - len(date_part) - 3

    if available > 20:
        content = ' - '.join(parts[:-1])
        if len(content) > available:
            return f"{content[:available - 3]}... - {date_part}", True

    return name[:max_length - 3] + '...', True


def _event_from_parsed(parsed: Dict[str, Any]) -> Tuple[Optional[str], bool]:
    if parsed.get('teams'):
        teams = parsed['teams']
        return f"{teams.home} vs {teams.away}", True
    if parsed.get('event'):
        return parsed['event'], False
    return None, False


def generate_canonical_name_from_smugmug(album: SmugMugAlbumData) -> CanonicalNameResult:
    """
    Generate the canonical name for a SmugMug album.

    Event label priority: enrichment teams > enrichment event name >
    parsed existing name. The existing name is always the drift baseline.
    """
    parts: List[str] = []
    is_matchup = False
    is_multi_day = False
    confidence = 'low'

    enrichment = album.enrichment
    if enrichment and enrichment.teams:
        parts.append(f"{clean_team_name(enrichment.teams.home)} vs "
                     f"{clean_team_name(enrichment.teams.away)}")
        is_matchup = True
        confidence = 'high'
    elif enrichment and enrichment.event_name:
        parts.append(clean_event_name(enrichment.event_name, enrichment.sport_type))
        confidence = 'high'
    else:
        event, is_matchup = _event_from_parsed(parse_existing_name(album.name or ''))
        if event:
            parts.append(event)
            confidence = 'medium'

    earliest, latest, date_source = extract_date_range(album)
    if date_source in ('exif', 'album_field') and confidence == 'low':
        confidence = 'medium'

    if latest:
        canonical_date = format_canonical_date(earliest, latest)
        if canonical_date:
            parts.append(canonical_date)
            is_multi_day = earliest != latest

    name, truncated = truncate_if_needed(' - '.join(parts), MAX_LENGTH_HARD)
    score, changes = calculate_drift_score(album.name or '', name)

    return CanonicalNameResult(
        name=name,
        length=len(name),
        truncated=truncated,
        components={
            'event': parts[0] if parts else '',
            'date': parts[1] if len(parts) > 1 else '',
        },
        metadata={
            'is_matchup': is_matchup,
            'is_multi_day': is_multi_day,
            'date_source': date_source,
            'confidence': confidence,
        },
        drift_score=score,
        drift_analysis={
            'existing_name': album.name,
            'proposed_name': name,
            'changes': changes,
        },
    )


def generate_canonical_name(name_input: AlbumNameInput) -> CanonicalNameResult:
    """Legacy naming path: no date-source tracking and no drift score."""
    parts: List[str] = []
    is_matchup = False
    is_multi_day = False

    if name_input.teams:
        parts.append(f"{clean_team_name(name_input.teams.home)} vs "
                     f"{clean_team_name(name_input.teams.away)}")
        is_matchup = True
    elif name_input.event_name:
        parts.append(clean_event_name(name_input.event_name, name_input.sport_type))
    elif name_input.current_name:
        event, is_matchup = _event_from_parsed(parse_existing_name(name_input.current_name))
        if event:
            parts.append(event)

    earliest = name_input.earliest_photo_date
    latest = name_input.latest_photo_date or earliest
    if latest:
        canonical_date = format_canonical_date(earliest, latest)
        if canonical_date:
            parts.append(canonical_date)
            is_multi_day = earliest != latest

    name, truncated = truncate_if_needed(' - '.join(parts), MAX_LENGTH_HARD)

    return CanonicalNameResult(
        name=name,
        length=len(name),
        truncated=truncated,
        components={
            'event': parts[0] if parts else '',
            'date': parts[1] if len(parts) > 1 else '',
        },
        metadata={
            'is_matchup': is_matchup,
            'is_multi_day': is_multi_day,
            'date_source': 'fallback',
            'confidence': 'medium',
        },
    )


def from_smugmug_album(name: str, keywords: Optional[List[str]] = None,
                       earliest_date: Optional[str] = None,
                       latest_date: Optional[str] = None) -> CanonicalNameResult:
    """Legacy wrapper: sport from album keywords, dates supplied by the caller."""
    sport = next((k for k in keywords or [] if k.lower() in SPORT_KEYWORDS), None)
    return generate_canonical_name(AlbumNameInput(
        current_name=name,
        sport_type=sport,
        earliest_photo_date=earliest_date,
        latest_photo_date=latest_date,
    ))


def validate_canonical_name(name: str) -> Dict[str, Any]:
    """
    Check a name against the naming rules.

    Returns:
        Dict with valid, warnings and errors
    """
    warnings: List[str] = []
    errors: List[str] = []

    if len(name) > MAX_LENGTH_HARD:
        errors.append(f"Name exceeds maximum length ({len(name)} > {MAX_LENGTH_HARD})")

    if len(name) > MAX_LENGTH_IDEAL:
        warnings.append(f"Name over ideal length ({len(name)} > {MAX_LENGTH_IDEAL}), will wrap")

    if '  ' in name:
        errors.append('Name contains double spaces')

    if _ISO_DATE.search(name):
        warnings.append('Name contains ISO date format (should use "Mon DD" or "Mon YYYY")')

    for prefix in REDUNDANT_PREFIXES:
        if prefix in name:
            warnings.append(f'Name contains redundant prefix: "{prefix}"')

    return {
        'valid': not errors,
        'warnings': warnings,
        'errors': errors,
    }
