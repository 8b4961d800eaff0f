"""PostgreSQL connection URLs for the AWV document store.

``DATABASE_URL`` wins when set.  Otherwise the URL is assembled from
``PG_HOST`` / ``PG_PORT`` / ``PG_USER`` / ``PG_PASSWORD`` / ``PG_DATABASE``,
each defaulting to a local ``awv`` database.

The runtime engine speaks asyncpg while Alembic runs on psycopg2, so the
same location is handed out with two driver prefixes.
"""

import os

_PLAIN_SCHEME = "postgresql://"
_ASYNC_SCHEME = "postgresql+asyncpg://"

# env var -> local development default
_PART_DEFAULTS = {
    "PG_HOST": "localhost",
    "PG_PORT": "5432",
    "PG_USER": "awv",
    "PG_PASSWORD": "awv",
    "PG_DATABASE": "awv",
}


def _configured_url() -> str:
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    parts = {key: os.getenv(key, default) for key, default in _PART_DEFAULTS.items()}
    return (
        f"{_PLAIN_SCHEME}{parts['PG_USER']}:{parts['PG_PASSWORD']}"
        f"@{parts['PG_HOST']}:{parts['PG_PORT']}/{parts['PG_DATABASE']}"
    )


def get_sync_url() -> str:
    """URL for Alembic migrations (psycopg2)."""
    return _configured_url().replace(_ASYNC_SCHEME, _PLAIN_SCHEME, 1)


def get_async_url() -> str:
    """URL for the application's async engine (asyncpg)."""
    url = _configured_url()
    if url.startswith(_PLAIN_SCHEME):
        return _ASYNC_SCHEME + url[len(_PLAIN_SCHEME):]
    return url
