"""
Command groups for the sportfolio CLI, plus helpers they share.
"""

import sys
from typing import Any, Dict

import click

from ..db.connection import configure_database, get_session_factory
from ..exceptions import DatabaseNotConfiguredError


def get_config(ctx: click.Context) -> Dict[str, Any]:
    obj = ctx.find_root().obj or {}
    return obj.get('config') or {}


def fail(message: str, code: int = 1):
    """Print a one-line error and exit."""
    click.echo(f"❌ {message}", err=True)
    sys.exit(code)


def ensure_database(ctx: click.Context) -> None:
    """Configure the database from the loaded config unless already configured."""
    if get_session_factory() is not None:
        return
    try:
        configure_database(get_config(ctx))
    except DatabaseNotConfiguredError as e:
        fail(str(e))


def is_quiet(ctx: click.Context) -> bool:
    obj = ctx.find_root().obj or {}
    return bool(obj.get('quiet'))
