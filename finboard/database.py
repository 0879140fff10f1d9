from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from finboard.config import settings

def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value

def register_sqlite_functions(async_engine: AsyncEngine) -> AsyncEngine:
    """Replace SQLite's ASCII-only lower() so ILIKE folds non-ASCII letters too."""
    if async_engine.dialect.name != "sqlite":
        return async_engine

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower)

    return async_engine

# Create async engine
engine = register_sqlite_functions(create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    future=True
))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()

# Dependency to get DB session
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
