"""
SmugMug API v2 client.

Requests are signed with OAuth 1.0a (HMAC-SHA1) via requests-oauthlib.
EXIF is only returned for an image when `_expand=ImageMetadata` is
requested, one image per call, so album-wide EXIF fetches are sequential
with a flat delay between calls.
"""

import time
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from requests_oauthlib import OAuth1Session

from ..exceptions import ConfigurationError, SmugMugAPIError

logger = logging.getLogger(__name__)

API_BASE = 'https://api.smugmug.com'
API_VERSION = 'api/v2'
PAGE_SIZE = 100
EXIF_REQUEST_DELAY_MS = 200


class SmugMugClient:
    """Authenticated SmugMug API client."""

    def __init__(self, api_key: Optional[str], api_secret: Optional[str],
                 access_token: Optional[str], access_token_secret: Optional[str],
                 nickname: Optional[str] = None,
                 request_delay_ms: int = EXIF_REQUEST_DELAY_MS,
                 session=None):
        """
        Initialize the client.

        Args:
            api_key: OAuth consumer key
            api_secret: OAuth consumer secret
            access_token: OAuth access token
            access_token_secret: OAuth access token secret
            nickname: Account nickname, used by album search
            request_delay_ms: Delay between per-image EXIF requests
            session: Pre-built requests-compatible session, mostly for tests

        Raises:
            ConfigurationError: If any credential is missing
        """
        if not api_key or not api_secret:
            raise ConfigurationError(
                "Missing SmugMug API credentials (SMUGMUG_API_KEY, SMUGMUG_API_SECRET)")
        if not access_token or not access_token_secret:
            raise ConfigurationError(
                "Missing SmugMug access tokens (SMUGMUG_ACCESS_TOKEN, SMUGMUG_ACCESS_TOKEN_SECRET)")

        self.nickname = nickname
        self.request_delay_ms = request_delay_ms
        self.session = session or OAuth1Session(
            api_key,
            client_secret=api_secret,
            resource_owner_key=access_token,
            resource_owner_secret=access_token_secret,
            signature_method='HMAC-SHA1',
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'SmugMugClient':
        """Build a client from the `smugmug` config section."""
        section = config.get('smugmug', {})

        def value(key):
            raw = section.get(key)
            if isinstance(raw, str) and raw.startswith('${'):
                return None
            return raw

        return cls(
            value('api_key'),
            value('api_secret'),
            value('access_token'),
            value('access_token_secret'),
            nickname=value('nickname'),
            request_delay_ms=int(section.get('request_delay_ms', EXIF_REQUEST_DELAY_MS)),
        )

    def _url(self, endpoint: str) -> str:
        # Uris returned by the API already carry the /api/v2 prefix
        if endpoint.startswith('/api/v2'):
            return f"{API_BASE}{endpoint}"
        return f"{API_BASE}/{API_VERSION}{endpoint}"

    def request(self, method: str, endpoint: str, body: Optional[Dict[str, Any]] = None,
                params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make a signed API request.

        Raises:
            SmugMugAPIError: On any non-2xx response, a transport failure
                or a body that is not JSON
        """
        url = self._url(endpoint)
        logger.debug(f"SmugMug {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                headers={'Accept': 'application/json', 'Content-Type': 'application/json'},
            )
        except requests.RequestException as e:
            raise SmugMugAPIError(0, f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise SmugMugAPIError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise SmugMugAPIError(response.status_code, f"Invalid JSON body: {e}") from e

    def get_album(self, album_key: str) -> Dict[str, Any]:
        result = self.request('GET', f"/album/{album_key}")
        return result['Response']['Album']

    def update_album(self, album_key: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update album metadata (Name, Description, Keywords, Privacy, ...).
        """
        result = self.request('PATCH', f"/album/{album_key}", body=updates)
        logger.info(f"Updated SmugMug album {album_key}: {sorted(updates)}")
        return result['Response'].get('Album', {})

    def get_album_photos(self, album_key: str, count: int = 100) -> List[Dict[str, Any]]:
        result = self.request('GET', f"/album/{album_key}!images", params={'count': count or 100})
        return result['Response'].get('AlbumImage') or []

    def get_photo_with_exif(self, image_key: str) -> Dict[str, Any]:
        """Image fields plus its ImageMetadata as `EXIF`."""
        result = self.request('GET', f"/image/{image_key}", params={'_expand': 'ImageMetadata'})
        response = result['Response']
        image = response['Image']
        return {
            'ImageKey': image.get('ImageKey'),
            'FileName': image.get('FileName'),
            'Caption': image.get('Caption'),
            'Keywords': image.get('Keywords'),
            'EXIF': response.get('ImageMetadata'),
        }

    def get_album_with_exif(self, album_key: str, max_photos: Optional[int] = None,
                            on_progress: Optional[Callable[[int, int], None]] = None
                            ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """
        Fetch an album and its photos with EXIF, one image at a time.

        A failed EXIF fetch keeps the bare photo and moves on.

        Returns:
            Tuple of (album, photos)
        """
        album = self.get_album(album_key)
        photos = self.get_album_photos(album_key)
        if max_photos and len(photos) > max_photos:
            photos = photos[:max_photos]

        with_exif: List[Dict[str, Any]] = []
        for i, photo in enumerate(photos):
            try:
                with_exif.append(self.get_photo_with_exif(photo['ImageKey']))
            except SmugMugAPIError as e:
                logger.error(f"Failed to fetch EXIF for {photo.get('ImageKey')}: {e}")
                with_exif.append(photo)

            if on_progress:
                on_progress(i + 1, len(photos))
            if i < len(photos) - 1:
                time.sleep(self.request_delay_ms / 1000)

        return album, with_exif

    def get_auth_user(self) -> Dict[str, Any]:
        result = self.request('GET', '/!authuser')
        return result['Response']['User']

    def search_albums(self, query: str) -> List[Dict[str, Any]]:
        """Search the account's albums by text."""
        if not self.nickname:
            self.nickname = self.get_auth_user().get('NickName')
        result = self.request('GET', f"/folder/user/{self.nickname}!albums", params={'text': query})
        return result['Response'].get('Album') or []

    def get_all_albums(self) -> List[Dict[str, Any]]:
        """
        All albums of the authenticated user.

        Pages through the user's albums Uri, 100 per page, until the
        response has no NextPage.
        """
        user = self.get_auth_user()
        albums_uri = user['Uris']['UserAlbums']['Uri']

        albums: List[Dict[str, Any]] = []
        start = 1
        while True:
            result = self.request('GET', albums_uri, params={'start': start, 'count': PAGE_SIZE})
            response = result['Response']
            albums.extend(response.get('Album') or [])

            pages = response.get('Pages')
            if not pages or not pages.get('NextPage'):
                break
            start += PAGE_SIZE

        logger.info(f"Fetched {len(albums)} albums from SmugMug")
        return albums


def extract_exif_date(exif: Optional[Dict[str, Any]]) -> Optional[str]:
    """'2025:05:30 18:15:23' -> '2025-05-30'."""
    if not exif or not exif.get('DateTimeOriginal'):
        return None
    date_part = str(exif['DateTimeOriginal']).split(' ')[0]
    return date_part.replace(':', '-')


def extract_date_range(photos: List[Dict[str, Any]]) -> Tuple[Optional[str], Optional[str]]:
    """Earliest and latest EXIF dates across photos."""
    dates = sorted(d for d in (extract_exif_date(p.get('EXIF')) for p in photos) if d)
    if not dates:
        return None, None
    return dates[0], dates[-1]
