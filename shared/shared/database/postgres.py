import os
import ssl
from pathlib import Path
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

# Deterministic constraint names so Alembic revisions stay stable.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))

AsyncSessionFactory = async_sessionmaker[AsyncSession]


def build_ssl_engine_kwargs() -> dict[str, Any]:
    """Engine kwargs carrying asyncpg SSL ``connect_args``, driven by DATABASE_SSL / DATABASE_SSL_CERT."""
    mode = os.environ.get("DATABASE_SSL", "").lower()
    if not mode or mode == "disable":
        return {}

    cert_path = os.environ.get("DATABASE_SSL_CERT", "")
    if cert_path and Path(cert_path).exists():
        return {"connect_args": {"ssl": ssl.create_default_context(cafile=cert_path)}}

    # encrypted, no certificate verification
    return {"connect_args": {"ssl": "require"}}


def get_async_engine(
    database_url: str,
    *,
    pool_size: int = 5,
    max_overflow: int = 10,
    **kwargs: Any,
) -> AsyncEngine:
    return create_async_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
        **{**build_ssl_engine_kwargs(), **kwargs},
    )


def get_async_session_factory(
    database_url: str,
    *,
    expire_on_commit: bool = False,
    **engine_kwargs: Any,
) -> AsyncSessionFactory:
    return async_sessionmaker(
        get_async_engine(database_url, **engine_kwargs),
        class_=AsyncSession,
        expire_on_commit=expire_on_commit,
        autoflush=False,
    )
