"""
Shared fixtures: in-memory SQLite database, photo factory and CLI wiring.
"""

import itertools
import logging
from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sportfolio.db.connection import configure_database, init_database, reset_database
from sportfolio.db.models import Base, PhotoMetadata
from sportfolio.utils.caching import reset_cache


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def session_scope(session_factory):
    """Commit/rollback context manager over the test engine, like db.get_session."""
    @contextmanager
    def scope():
        s = session_factory()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    return scope


def _photo_fields(n, fields):
    data = {
        'photo_id': f'p{n:04d}',
        'image_key': f'img{n:04d}',
        'image_url': f'https://photos.example.com/{n}/full.jpg',
    }
    data.update(fields)
    return data


@pytest.fixture
def make_photo(session):
    """Insert and commit a photo; keyword arguments override columns."""
    counter = itertools.count(1)

    def factory(**fields):
        photo = PhotoMetadata(**_photo_fields(next(counter), fields))
        session.add(photo)
        session.commit()
        return photo

    return factory


@pytest.fixture
def cli_db(monkeypatch):
    """Configure the global database used by CLI commands."""
    monkeypatch.delenv('REDIS_URL', raising=False)
    reset_cache()
    reset_database()
    configure_database('sqlite://')
    init_database()

    counter = itertools.count(1)

    def add_photo(**fields):
        from sportfolio.db.connection import get_session
        with get_session() as s:
            s.add(PhotoMetadata(**_photo_fields(next(counter), fields)))

    yield add_photo

    reset_database()
    reset_cache()


@pytest.fixture
def cli_config():
    return {
        'database': {'url': 'sqlite://'},
        'enrichment': {'provider': 'gemini', 'batch_size': 5, 'batch_delay_ms': 0,
                       'months_back': 24, 'prompt': 'delta', 'dry_run': False},
        'gemini': {'api_key': None, 'model': 'gemini-2.0-flash-lite'},
        'smugmug': {},
        'naming': {'min_drift_score': 10, 'rate_limit_ms': 0, 'photo_sample': 100},
        'cache': {'redis_url': None, 'layout_ttl': 300},
        'logging': {'level': 'WARNING', 'color': False},
    }


@pytest.fixture(autouse=True)
def _drop_console_handler():
    """CLI runs attach a stdout handler bound to the runner's stream."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, '_sportfolio_console', False):
            root.removeHandler(handler)
