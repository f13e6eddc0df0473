"""Async SQLAlchemy engine and session factory for the snapshot store."""

import re
import ssl

import certifi
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from orion.config import Settings

# Hosted Postgres providers that require TLS
_SSL_HOSTS = ("supabase.co", "supabase.com", "neon.tech", "render.com")


def normalize_database_url(database_url: str) -> str:
    """Convert a postgres:// URL to postgresql+asyncpg:// and drop sslmode.

    asyncpg takes an 'ssl' connect arg instead of the libpq sslmode param.
    """
    url = database_url
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if "sslmode=" in url:
        url = re.sub(r"[?&]sslmode=[^&]*", "", url)
        # Fix dangling ? or &
        url = url.rstrip("?&")
    return url


def needs_ssl(database_url: str) -> bool:
    return any(host in database_url for host in _SSL_HOSTS) or "sslmode=" in database_url


def build_connect_args(settings: Settings) -> dict:
    """Build asyncpg connect args, with an SSL context for remote Postgres."""
    connect_args: dict = {}
    if not needs_ssl(settings.database_url):
        return connect_args

    ssl_ctx = ssl.create_default_context()
    try:
        ssl_ctx.load_verify_locations(certifi.where())
    except OSError:
        if settings.is_development:
            ssl_ctx.check_hostname = False
            ssl_ctx.verify_mode = ssl.CERT_NONE
    connect_args["ssl"] = ssl_ctx
    return connect_args


def create_store_engine(settings: Settings) -> AsyncEngine | None:
    """Create the store engine, or None when the store is not configured.

    The access key is the database role password; it replaces whatever
    password the URL carries.
    """
    if not settings.store_configured:
        return None

    url = make_url(normalize_database_url(settings.database_url)).set(
        password=settings.database_access_key
    )
    return create_async_engine(
        url,
        echo=settings.is_development,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        connect_args=build_connect_args(settings),
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
