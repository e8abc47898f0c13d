"""
Tests for vision providers with mocked HTTP and API clients.
"""

import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from sportfolio.enrichment.providers import ClaudeVisionProvider, create_provider
from sportfolio.exceptions import ConfigurationError, ProviderError


def _image_bytes(size, fmt='PNG'):
    buf = io.BytesIO()
    Image.new('RGB', size, (200, 120, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def claude():
    return ClaudeVisionProvider({'api_key': 'test-key', 'model': 'claude-3-5-haiku-latest'})


class TestCreateProvider:
    """Provider selection from config."""

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            create_provider({}, 'openai')

    def test_unexpanded_key_is_missing(self):
        config = {'enrichment': {'provider': 'gemini'},
                  'gemini': {'api_key': '${GOOGLE_API_KEY}'}}
        with pytest.raises(ConfigurationError):
            create_provider(config)

    def test_claude(self):
        provider = create_provider({'claude': {'api_key': 'test-key'}}, 'claude')
        assert provider.name == 'claude'
        assert provider.model_name == 'claude-3-5-haiku-latest'


class TestImages:
    """Download and re-encoding."""

    def test_large_image_is_downscaled_to_jpeg(self, claude):
        data = claude.prepare_image(_image_bytes((3000, 2000)))

        with Image.open(io.BytesIO(data)) as img:
            assert img.format == 'JPEG'
            assert img.size == (1568, 1045)

    def test_small_jpeg_passes_through(self, claude):
        jpeg = _image_bytes((100, 80), 'JPEG')
        claude.http = MagicMock()
        claude.http.get.return_value = MagicMock(content=jpeg, headers={'Content-Type': 'image/jpeg'})

        assert claude.fetch_image('https://photos.example.com/1/thumb.jpg') == jpeg

    def test_fetch_failure(self, claude):
        claude.http = MagicMock()
        claude.http.get.side_effect = requests.ConnectionError('boom')

        with pytest.raises(ProviderError):
            claude.fetch_image('https://photos.example.com/1/thumb.jpg')

    def test_unreadable_image(self, claude):
        with pytest.raises(ProviderError):
            claude.prepare_image(b'not an image')


class TestClaudeAnalyze:
    """Message construction and text extraction."""

    def test_joins_text_blocks(self, claude):
        claude.client = MagicMock()
        claude.client.messages.create.return_value = SimpleNamespace(content=[
            SimpleNamespace(type='text', text='{"lighting": '),
            SimpleNamespace(type='text', text='"soft"}'),
        ])

        assert claude.analyze(b'jpeg', 'prompt') == '{"lighting": "soft"}'
        kwargs = claude.client.messages.create.call_args.kwargs
        assert kwargs['model'] == 'claude-3-5-haiku-latest'
        assert kwargs['messages'][0]['content'][1] == {'type': 'text', 'text': 'prompt'}
