"""
Vision API providers for photo enrichment.

Each provider downloads the photo, sends it with a prompt to a hosted
vision model and returns the raw text response. Parsing happens in
`prompts`.
"""

import io
import base64
import logging
from typing import Any, Dict, Optional

import requests
from PIL import Image

import anthropic
import google.generativeai as genai

from ..exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_SIZE = 4 * 1024 * 1024  # 4MB
DEFAULT_MAX_EDGE = 1568
FETCH_TIMEOUT_SECONDS = 30


def _configured(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and value.startswith('${'):
        return None
    return value


class VisionProvider:
    """Base class for hosted vision models."""

    name = 'base'

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.model_name = config.get('model')
        self.max_image_size = int(config.get('max_image_size', DEFAULT_MAX_IMAGE_SIZE))
        self.max_edge = int(config.get('max_edge', DEFAULT_MAX_EDGE))
        self.http = requests.Session()

    def fetch_image(self, url: str) -> bytes:
        """
        Download an image, re-encoding it as JPEG when it is too large
        or not already a JPEG.

        Raises:
            ProviderError: If the download fails
        """
        try:
            response = self.http.get(url, timeout=FETCH_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ProviderError(f"Failed to fetch image {url}: {e}") from e

        data = response.content
        content_type = response.headers.get('Content-Type', '')
        if len(data) <= self.max_image_size and 'jpeg' in content_type:
            return data
        return self.prepare_image(data)

    def prepare_image(self, data: bytes) -> bytes:
        """Downscale to max_edge and re-encode as JPEG."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                rgb = img.convert('RGB')
                width, height = rgb.size
                longest = max(width, height)
                if longest > self.max_edge:
                    scale = self.max_edge / float(longest)
                    rgb = rgb.resize((max(1, int(width * scale)), max(1, int(height * scale))),
                                     Image.Resampling.LANCZOS)
                buf = io.BytesIO()
                rgb.save(buf, format='JPEG', quality=85, optimize=True)
                return buf.getvalue()
        except OSError as e:
            raise ProviderError(f"Unreadable image data: {e}") from e

    def analyze(self, image_bytes: bytes, prompt: str) -> str:
        """Send one JPEG and a prompt; return the model's text."""
        raise NotImplementedError

    def analyze_url(self, url: str, prompt: str) -> str:
        return self.analyze(self.fetch_image(url), prompt)


class GeminiVisionProvider(VisionProvider):
    """Google Gemini implementation."""

    name = 'gemini'

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Gemini provider.

        Args:
            config: The `gemini` config section
        """
        super().__init__(config)

        api_key = _configured(config.get('api_key'))
        if not api_key:
            raise ConfigurationError("Gemini API key not provided (GOOGLE_API_KEY)")

        genai.configure(api_key=api_key)
        self.model_name = config.get('model', 'gemini-2.0-flash-lite')
        self.model = genai.GenerativeModel(self.model_name)
        self.generation_config = {
            'temperature': config.get('temperature', 0.2),
            'max_output_tokens': config.get('max_output_tokens', 1024),
        }

    def analyze(self, image_bytes: bytes, prompt: str) -> str:
        try:
            response = self.model.generate_content(
                [prompt, {'mime_type': 'image/jpeg', 'data': image_bytes}],
                generation_config=self.generation_config,
            )
            return response.text
        except Exception as e:
            raise ProviderError(f"Gemini analysis failed: {e}") from e


class ClaudeVisionProvider(VisionProvider):
    """Anthropic Claude implementation."""

    name = 'claude'

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Claude provider.

        Args:
            config: The `claude` config section
        """
        super().__init__(config)

        api_key = _configured(config.get('api_key'))
        if not api_key:
            raise ConfigurationError("Anthropic API key not provided (ANTHROPIC_API_KEY)")

        self.client = anthropic.Anthropic(api_key=api_key)
        self.model_name = config.get('model', 'claude-3-5-haiku-latest')
        self.max_tokens = int(config.get('max_tokens', 1024))

    def analyze(self, image_bytes: bytes, prompt: str) -> str:
        image_data = base64.standard_b64encode(image_bytes).decode('utf-8')
        try:
            response = self.client.messages.create(
                model=self.model_name,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        'role': 'user',
                        'content': [
                            {
                                'type': 'image',
                                'source': {'type': 'base64', 'media_type': 'image/jpeg',
                                           'data': image_data},
                            },
                            {'type': 'text', 'text': prompt},
                        ],
                    }
                ],
            )
        except anthropic.APIError as e:
            raise ProviderError(f"Claude analysis failed: {e}") from e

        return ''.join(block.text for block in response.content if block.type == 'text')


PROVIDERS = {
    'gemini': GeminiVisionProvider,
    'claude': ClaudeVisionProvider,
}


def create_provider(config: Dict[str, Any], name: Optional[str] = None) -> VisionProvider:
    """
    Build the configured vision provider.

    Args:
        config: Full Sportfolio configuration
        name: Provider name, overriding enrichment.provider

    Raises:
        ConfigurationError: For an unknown provider or missing credentials
    """
    name = name or config.get('enrichment', {}).get('provider', 'gemini')
    if name not in PROVIDERS:
        raise ConfigurationError(f"Unknown vision provider '{name}'. "
                                 f"Choose from: {', '.join(sorted(PROVIDERS))}")

    provider = PROVIDERS[name](config.get(name, {}))
    logger.info(f"Using {name} vision provider ({provider.model_name})")
    return provider
