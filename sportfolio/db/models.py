"""
Database models for Sportfolio.

Defines the SQLAlchemy ORM model for the flat `photo_metadata` table and the
canonical vocabularies its categorical columns are normalized to.
"""

from sqlalchemy import (
    Column, String, Float, DateTime, Text, Index, CheckConstraint, JSON
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB, 'postgresql')


# Canonical vocabularies

SPORT_TYPES = (
    'volleyball', 'basketball', 'soccer', 'football', 'baseball',
    'softball', 'track', 'portrait', 'candid', 'other',
)

PHOTO_CATEGORIES = ('action', 'celebration', 'candid', 'portrait', 'warmup', 'ceremony')

# Categories that never carry a play_type
NON_ACTION_CATEGORIES = ('candid', 'portrait', 'warmup', 'ceremony')

PLAY_TYPES_BY_SPORT = {
    'volleyball': ('spike', 'attack', 'block', 'dig', 'set', 'serve', 'pass'),
    'basketball': ('dunk', 'layup', 'jump_shot', 'rebound', 'block', 'pass', 'dribble'),
    'soccer': ('kick', 'header', 'tackle', 'save', 'dribble', 'pass'),
    'softball': ('pitch', 'hit', 'catch', 'throw', 'slide', 'run'),
    'baseball': ('pitch', 'hit', 'catch', 'throw', 'slide', 'run'),
    'football': ('throw', 'catch', 'run', 'tackle', 'block', 'kick'),
    'track': ('sprint', 'hurdle', 'relay', 'jump', 'throw'),
}

# Legacy volleyball play types from the first enrichment pass
VOLLEYBALL_PLAY_TYPES = ('attack', 'block', 'dig', 'set', 'serve', 'pass')

ACTION_INTENSITIES = ('low', 'medium', 'high', 'peak')

COMPOSITIONS = ('rule_of_thirds', 'leading_lines', 'centered', 'symmetry', 'frame_within_frame')

TIMES_OF_DAY = ('golden_hour', 'midday', 'evening', 'blue_hour', 'night', 'dawn')

LIGHTING_TYPES = ('natural', 'backlit', 'dramatic', 'soft', 'artificial')

COLOR_TEMPERATURES = ('warm', 'cool', 'neutral')

EMOTIONS = ('triumph', 'determination', 'intensity', 'focus', 'excitement', 'serenity')

TIME_IN_GAME_VALUES = ('first_5_min', 'middle', 'final_5_min', 'overtime', 'unknown')

SCORE_COLUMNS = ('sharpness', 'composition_score', 'exposure_accuracy', 'emotional_impact')


class PhotoMetadata(Base):
    """
    One SmugMug photo and everything known about it.

    Bucket 1 columns are user-facing search filters; bucket 2 columns are
    internal metadata used for story curation.
    """
    __tablename__ = 'photo_metadata'

    # Identity
    photo_id = Column(String(64), primary_key=True)
    image_key = Column(String(64), unique=True, nullable=False)

    # Image URLs
    image_url = Column(Text, nullable=False)
    thumbnail_url = Column(Text)
    original_url = Column(Text)

    # Descriptive
    title = Column(Text)
    caption = Column(Text)
    keywords = Column(JSONType, default=list)

    # Album / collection association
    album_key = Column(String(64), index=True)
    album_name = Column(Text)
    collection_slug = Column(String(100), index=True)

    # Bucket 1: concrete, filterable
    sport_type = Column(String(50))
    photo_category = Column(String(50))
    play_type = Column(String(50))
    action_type = Column(String(100))
    action_intensity = Column(String(20))
    composition = Column(String(50))
    time_of_day = Column(String(50))
    lighting = Column(String(50))
    color_temperature = Column(String(20))

    # Bucket 2: internal story metadata
    emotion = Column(String(50))
    sharpness = Column(Float)
    composition_score = Column(Float)
    exposure_accuracy = Column(Float)
    emotional_impact = Column(Float)
    time_in_game = Column(String(20))
    athlete_id = Column(String(100))
    event_id = Column(String(64))
    ai_confidence = Column(Float)

    # Enrichment bookkeeping
    ai_provider = Column(String(50))
    ai_cost = Column(Float)
    enriched_at = Column(DateTime)

    # Timestamps
    photo_date = Column(DateTime)
    upload_date = Column(DateTime, default=func.now())
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('sharpness IS NULL OR (sharpness >= 0 AND sharpness <= 10)',
                        name='ck_sharpness_range'),
        CheckConstraint('composition_score IS NULL OR (composition_score >= 0 AND composition_score <= 10)',
                        name='ck_composition_score_range'),
        CheckConstraint('exposure_accuracy IS NULL OR (exposure_accuracy >= 0 AND exposure_accuracy <= 10)',
                        name='ck_exposure_accuracy_range'),
        CheckConstraint('emotional_impact IS NULL OR (emotional_impact >= 0 AND emotional_impact <= 10)',
                        name='ck_emotional_impact_range'),
        CheckConstraint('ai_confidence IS NULL OR (ai_confidence >= 0 AND ai_confidence <= 1)',
                        name='ck_ai_confidence_range'),
        CheckConstraint('ai_cost IS NULL OR ai_cost >= 0', name='ck_ai_cost_positive'),
        Index('idx_sport_type', 'sport_type'),
        Index('idx_photo_category', 'photo_category'),
        Index('idx_photo_date', 'photo_date'),
        Index('idx_photo_lighting', 'lighting'),
        Index('idx_photo_action_aesthetic', 'play_type', 'time_of_day', 'composition', 'lighting'),
        Index('idx_category_emotion', 'photo_category', 'emotion'),
    )

    def to_dict(self) -> dict:
        """Plain dict of all columns."""
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}

    @property
    def best_url(self) -> str:
        """Thumbnail when available, full image otherwise."""
        return self.thumbnail_url or self.image_url

    def __repr__(self):
        return f"<PhotoMetadata(photo_id={self.photo_id!r}, album_key={self.album_key!r}, sport_type={self.sport_type!r})>"
