"""DB helpers for tests: seed the SQLite file the app reads and run async code against it."""

from __future__ import annotations

import asyncio

from sqlalchemy import create_engine, delete
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from finboard.config import settings
from finboard.database import Base, register_sqlite_functions
from finboard.models import Transaction

ASYNC_DATABASE_URL = settings.DATABASE_URL
SYNC_DATABASE_URL = ASYNC_DATABASE_URL.replace("sqlite+aiosqlite://", "sqlite://", 1)

_sync_engine = create_engine(SYNC_DATABASE_URL, poolclass=NullPool)


def create_schema() -> None:
    Base.metadata.create_all(_sync_engine)


def seed_transactions(records: list[dict]) -> None:
    """Replace the whole transactions table with ``records``."""
    with Session(_sync_engine) as session:
        session.execute(delete(Transaction))
        session.add_all([Transaction(**record) for record in records])
        session.commit()


def run_in_session(fn):
    """Run ``await fn(session)`` on a fresh event loop and engine."""

    async def _run():
        engine = register_sqlite_functions(create_async_engine(ASYNC_DATABASE_URL, poolclass=NullPool))
        try:
            async with async_sessionmaker(engine, expire_on_commit=False)() as session:
                return await fn(session)
        finally:
            await engine.dispose()

    return asyncio.run(_run())
