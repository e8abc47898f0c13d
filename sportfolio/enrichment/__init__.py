"""
AI enrichment: prompts, vision providers and backfill jobs.
"""

from .prompts import (
    BUCKET1_PROMPT, BUCKET2_PROMPT, COMBINED_PROMPT, SCHEMA_V2_DELTA_PROMPT,
    Bucket1Response, Bucket2Response, CombinedResponse, SchemaV2DeltaResponse,
    extract_json, parse_response, estimate_cost,
)
from .providers import VisionProvider, GeminiVisionProvider, ClaudeVisionProvider, create_provider
from .backfill import BackfillJob, BackfillRunner, get_job

__all__ = [
    'BUCKET1_PROMPT',
    'BUCKET2_PROMPT',
    'COMBINED_PROMPT',
    'SCHEMA_V2_DELTA_PROMPT',
    'Bucket1Response',
    'Bucket2Response',
    'CombinedResponse',
    'SchemaV2DeltaResponse',
    'extract_json',
    'parse_response',
    'estimate_cost',
    'VisionProvider',
    'GeminiVisionProvider',
    'ClaudeVisionProvider',
    'create_provider',
    'BackfillJob',
    'BackfillRunner',
    'get_job',
]
