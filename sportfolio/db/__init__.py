"""
Sportfolio Database Module

Provides the photo metadata model, operations, and connection management.
"""

from .connection import (
    configure_database, get_session, get_session_factory, get_engine,
    init_database, drop_database, is_database_available, reset_database,
)
from .models import Base, PhotoMetadata
from .operations import PhotoOperations
from .album_utils import AlbumManager

__all__ = [
    'configure_database',
    'get_session',
    'get_session_factory',
    'get_engine',
    'init_database',
    'drop_database',
    'is_database_available',
    'reset_database',
    'Base',
    'PhotoMetadata',
    'PhotoOperations',
    'AlbumManager',
]
