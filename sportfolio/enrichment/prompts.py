"""
Vision prompts and response parsing for photo enrichment.

Two-bucket model:
    Bucket 1: concrete, filterable metadata exposed as user search filters.
    Bucket 2: subjective metadata used internally for story curation.

Each bucket has its own prompt; the combined prompt asks for both in one
call, and the schema v2 delta prompt asks only for the four columns added
in schema v2.
"""

import re
import json
import logging
from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, Optional

from ..exceptions import ResponseParseError

logger = logging.getLogger(__name__)


BUCKET1_PROMPT = """Analyze this volleyball photo and extract CONCRETE, SEARCHABLE metadata.

BE OBJECTIVE. BE CONCRETE. These fields will be exposed as user search filters.

Required Fields:

1. **play_type** (string | null): The specific sports action shown

   VOLLEYBALL: "spike", "block", "dig", "set", "serve", "pass"
   - "spike": Player attacking/hitting the ball over the net
   - "block": Player jumping to block at the net
   - "dig": Defensive save, usually low to ground
   - "set": Setting the ball for an attack
   - "serve": Serving the ball
   - "pass": Passing/bumping the ball to teammate

   BASKETBALL: "dunk", "layup", "jump_shot", "rebound", "block", "pass", "dribble"
   - "dunk": Player dunking the ball
   - "layup": Close-range shot at basket
   - "jump_shot": Mid-range or three-point shot
   - "rebound": Grabbing a missed shot
   - "block": Blocking opponent's shot
   - "pass": Passing to teammate
   - "dribble": Ball handling/driving

   SOCCER: "kick", "header", "tackle", "save", "dribble", "pass"
   SOFTBALL/BASEBALL: "pitch", "hit", "catch", "throw", "slide", "run"
   FOOTBALL: "throw", "catch", "run", "tackle", "block", "kick"
   TRACK: "sprint", "hurdle", "relay", "jump", "throw"

   CRITICAL RULES:
   - Return NULL if photo_category is "candid", "portrait", "warmup", or "ceremony"
   - ONLY "action" category photos should have a play_type value
   - Choose the PRIMARY action if multiple actions visible
   - Use underscores not hyphens (jump_shot NOT jump-shot)

2. **action_intensity** (string): The intensity level of the action
   Options: "low", "medium", "high", "peak"
   - "low": Warmup, practice, casual play
   - "medium": Standard gameplay, no critical moment
   - "high": Important play, rally in progress
   - "peak": Spectacular moment, game-critical play

3. **sport_type** (string): The sport being played
   Options: "volleyball", "basketball", "soccer", "tennis", etc.

4. **photo_category** (string): The type of photo
   Options: "action", "celebration", "candid", "portrait", "warmup", "ceremony"

5. **composition** (string): The PRIMARY composition pattern used (SINGLE VALUE ONLY)
   Options: "rule_of_thirds", "leading_lines", "centered", "symmetry", "frame_within_frame"
   - "rule_of_thirds": Subject positioned at intersection points of rule-of-thirds grid
   - "leading_lines": Strong lines (court lines, net, body lines) leading to subject
   - "centered": Subject positioned in center of frame
   - "symmetry": Balanced, mirror-like composition
   - "frame_within_frame": Subject framed by foreground elements (net, people, architecture)

   CRITICAL RULES:
   - Return ONLY ONE value (the most dominant composition pattern)
   - Use UNDERSCORES not hyphens (rule_of_thirds NOT rule-of-thirds)
   - NO multi-value strings (NO "close-up|dramatic-angle")
   - If multiple patterns present, choose the PRIMARY one

6. **time_of_day** (string): When the photo was taken (based on lighting)
   Options: "golden_hour", "midday", "evening", "blue_hour", "night", "dawn"
   - Analyze sky color, shadows, light temperature

7. **lighting** (string): The lighting type/quality
   Options: "natural", "backlit", "dramatic", "soft", "artificial"
   - "natural": Window or outdoor daylight
   - "backlit": Subject silhouetted against light
   - "dramatic": High contrast, directional light
   - "soft": Diffused, even lighting
   - "artificial": Gym/indoor artificial lighting

8. **color_temperature** (string): The overall color temperature
   Options: "warm", "cool", "neutral"
   - "warm": Golden, orange, sunset tones
   - "cool": Blue, teal, dawn tones
   - "neutral": Balanced, no strong color cast

Return ONLY JSON in this exact format (SINGLE composition value with underscores):
{
  "play_type": "block",
  "action_intensity": "peak",
  "sport_type": "volleyball",
  "photo_category": "action",
  "composition": "rule_of_thirds",
  "time_of_day": "evening",
  "lighting": "artificial",
  "color_temperature": "neutral"
}

NO explanations. NO markdown. ONLY JSON."""

BUCKET2_PROMPT = """Analyze this volleyball photo for INTERNAL AI story detection metadata.

These fields are NOT user-facing. They're used by the AI Story Curation Engine to generate narrative collections like "Comeback Stories", "Game-Winning Rallies", etc.

BE SUBJECTIVE where needed. Focus on narrative potential.

Required Fields:

1. **emotion** (string): The primary emotion conveyed
   Options: "triumph", "determination", "intensity", "focus", "excitement", "serenity"
   - "triumph": Victory, celebration, achievement
   - "determination": Grit, resolve, effort
   - "intensity": High energy, focused aggression
   - "focus": Concentration, calm precision
   - "excitement": Joy, anticipation, enthusiasm
   - "serenity": Calm, peaceful, composed

2. **sharpness** (number): Technical sharpness quality (0-10)
   - 0-3: Blurry, out of focus
   - 4-6: Acceptable sharpness
   - 7-8: Sharp, good quality
   - 9-10: Exceptionally sharp, tack-sharp

3. **composition_score** (number): Aesthetic composition quality (0-10)
   - 0-3: Poor composition, unbalanced
   - 4-6: Acceptable composition
   - 7-8: Good composition, well-balanced
   - 9-10: Excellent composition, award-worthy

4. **exposure_accuracy** (number): Exposure quality (0-10)
   - 0-3: Over/underexposed, poor histogram
   - 4-6: Acceptable exposure
   - 7-8: Good exposure, proper histogram
   - 9-10: Perfect exposure

5. **emotional_impact** (number): Subjective emotional intensity (0-10)
   - How strongly does this photo convey emotion?
   - 0-3: Little emotional content
   - 4-6: Some emotional content
   - 7-8: Strong emotional impact
   - 9-10: Exceptional emotional resonance

6. **time_in_game** (string | null): When in the game this occurred
   Options: "first_5_min", "middle", "final_5_min", "overtime", "unknown"
   - Use visual cues: score displays, player fatigue, crowd intensity
   - If no clear indicators, return "unknown"

7. **ai_confidence** (number): Overall detection confidence (0-1)
   - How confident are you in these assessments?
   - 0.0-0.5: Low confidence, many uncertain fields
   - 0.5-0.7: Medium confidence, some uncertain fields
   - 0.7-0.9: High confidence, most fields clear
   - 0.9-1.0: Very high confidence, all fields clear

Return ONLY JSON in this exact format:
{
  "emotion": "triumph",
  "sharpness": 8.5,
  "composition_score": 7.5,
  "exposure_accuracy": 8.0,
  "emotional_impact": 9.0,
  "time_in_game": "final_5_min",
  "ai_confidence": 0.85
}

NO explanations. NO markdown. ONLY JSON."""

COMBINED_PROMPT = f"""Analyze this volleyball photo and extract metadata for TWO purposes:

BUCKET 1: User-facing search filters (concrete, objective)
BUCKET 2: Internal story detection (subjective, narrative)

{BUCKET1_PROMPT}

AND ALSO:

{BUCKET2_PROMPT}

Return ONLY JSON combining both buckets:
{{
  "bucket1": {{
    "play_type": "block",
    "action_intensity": "peak",
    "sport_type": "volleyball",
    "photo_category": "action",
    "composition": "rule_of_thirds",
    "time_of_day": "evening",
    "lighting": "artificial",
    "color_temperature": "neutral"
  }},
  "bucket2": {{
    "emotion": "triumph",
    "sharpness": 8.5,
    "composition_score": 7.5,
    "exposure_accuracy": 8.0,
    "emotional_impact": 9.0,
    "time_in_game": "final_5_min",
    "ai_confidence": 0.85
  }}
}}

NO explanations. NO markdown. ONLY JSON."""

SCHEMA_V2_DELTA_PROMPT = """Analyze this volleyball photo and extract ONLY these 4 metadata fields:

1. **lighting** (string): The lighting type/quality
   Options: "natural", "backlit", "dramatic", "soft", "artificial"
   - "natural": Window or outdoor daylight
   - "backlit": Subject silhouetted against light
   - "dramatic": High contrast, directional light
   - "soft": Diffused, even lighting
   - "artificial": Gym/indoor artificial lighting

2. **color_temperature** (string): Overall color temperature
   Options: "warm", "cool", "neutral"
   - "warm": Golden, orange, sunset tones
   - "cool": Blue, teal, dawn tones
   - "neutral": Balanced, no strong color cast

3. **time_in_game** (string | null): When in the game this occurred
   Options: "first_5_min", "middle", "final_5_min", "overtime", "unknown"
   - Use visual cues: score displays, player fatigue, crowd intensity, body language
   - If no clear indicators, return "unknown"

4. **ai_confidence** (number): Overall detection confidence (0-1)
   - How confident are you in these 4 assessments?
   - 0.0-0.5: Low confidence
   - 0.5-0.7: Medium confidence
   - 0.7-0.9: High confidence
   - 0.9-1.0: Very high confidence

Return ONLY JSON in this exact format:
{
  "lighting": "artificial",
  "color_temperature": "neutral",
  "time_in_game": "final_5_min",
  "ai_confidence": 0.85
}

NO explanations. NO markdown. ONLY JSON."""


PROMPTS = {
    'bucket1': BUCKET1_PROMPT,
    'bucket2': BUCKET2_PROMPT,
    'combined': COMBINED_PROMPT,
    'delta': SCHEMA_V2_DELTA_PROMPT,
}

# USD per photo by (model, prompt kind)
COST_PER_PHOTO = {
    ('gemini-2.0-flash-lite', 'delta'): 0.000128,
    ('gemini-2.0-flash-lite', 'bucket1'): 0.000128,
    ('gemini-2.0-flash-lite', 'combined'): 0.000170,
    ('gemini-2.5-flash-lite', 'delta'): 0.000170,
    ('gemini-2.5-flash-lite', 'combined'): 0.000170,
    ('gemini-2.0-flash', 'delta'): 0.000170,
    ('gemini-2.0-flash', 'combined'): 0.000170,
}
DEFAULT_COST_PER_PHOTO = 0.000170


def estimate_cost(model: str, kind: str) -> float:
    return COST_PER_PHOTO.get((model, kind), DEFAULT_COST_PER_PHOTO)


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    if value == '' or value.lower() == 'null':
        return None
    return value


@dataclass
class Bucket1Response:
    play_type: Optional[str] = None
    action_intensity: Optional[str] = None
    sport_type: Optional[str] = None
    photo_category: Optional[str] = None
    composition: Optional[str] = None
    time_of_day: Optional[str] = None
    lighting: Optional[str] = None
    color_temperature: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Bucket1Response':
        return cls(**{f.name: _str_or_none(data.get(f.name)) for f in fields(cls)})

    def to_columns(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Bucket2Response:
    emotion: Optional[str] = None
    sharpness: Optional[float] = None
    composition_score: Optional[float] = None
    exposure_accuracy: Optional[float] = None
    emotional_impact: Optional[float] = None
    time_in_game: Optional[str] = None
    ai_confidence: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Bucket2Response':
        return cls(
            emotion=_str_or_none(data.get('emotion')),
            sharpness=_float_or_none(data.get('sharpness')),
            composition_score=_float_or_none(data.get('composition_score')),
            exposure_accuracy=_float_or_none(data.get('exposure_accuracy')),
            emotional_impact=_float_or_none(data.get('emotional_impact')),
            time_in_game=_str_or_none(data.get('time_in_game')),
            ai_confidence=_float_or_none(data.get('ai_confidence')),
        )

    def to_columns(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CombinedResponse:
    bucket1: Bucket1Response
    bucket2: Bucket2Response

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CombinedResponse':
        return cls(
            bucket1=Bucket1Response.from_dict(data.get('bucket1') or {}),
            bucket2=Bucket2Response.from_dict(data.get('bucket2') or {}),
        )

    def to_columns(self) -> Dict[str, Any]:
        return {**self.bucket1.to_columns(), **self.bucket2.to_columns()}


@dataclass
class SchemaV2DeltaResponse:
    lighting: Optional[str] = None
    color_temperature: Optional[str] = None
    time_in_game: Optional[str] = None
    ai_confidence: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SchemaV2DeltaResponse':
        return cls(
            lighting=_str_or_none(data.get('lighting')),
            color_temperature=_str_or_none(data.get('color_temperature')),
            time_in_game=_str_or_none(data.get('time_in_game')),
            ai_confidence=_float_or_none(data.get('ai_confidence')),
        )

    def to_columns(self) -> Dict[str, Any]:
        return asdict(self)


RESPONSE_TYPES = {
    'bucket1': Bucket1Response,
    'bucket2': Bucket2Response,
    'combined': CombinedResponse,
    'delta': SchemaV2DeltaResponse,
}

_JSON_BLOCK = re.compile(r'\{[\s\S]*\}')


def extract_json(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model response.

    Models sometimes wrap JSON in prose or markdown fences; the span from
    the first '{' to the last '}' is parsed.

    Raises:
        ResponseParseError: If no object is found or it does not parse
    """
    match = _JSON_BLOCK.search(text or '')
    if not match:
        raise ResponseParseError(f"Could not extract JSON from response: {text!r}", raw_text=text)

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e}", raw_text=text) from e

    if not isinstance(data, dict):
        raise ResponseParseError("Response JSON is not an object", raw_text=text)
    return data


def parse_response(kind: str, text: str):
    """
    Parse a model response for a prompt kind.

    Args:
        kind: 'bucket1', 'bucket2', 'combined' or 'delta'
        text: Raw model output

    Returns:
        The matching response dataclass
    """
    if kind not in RESPONSE_TYPES:
        raise ValueError(f"Unknown prompt kind: {kind}")
    return RESPONSE_TYPES[kind].from_dict(extract_json(text))
