"""SmugMug API access."""

from .client import SmugMugClient, extract_exif_date, extract_date_range

__all__ = ['SmugMugClient', 'extract_exif_date', 'extract_date_range']
