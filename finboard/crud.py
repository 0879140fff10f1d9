from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from finboard.models import Transaction, User

async def create_transactions(db: AsyncSession, records: Iterable[dict]) -> List[Transaction]:
    db_transactions = [Transaction(**record) for record in records]
    db.add_all(db_transactions)
    await db.commit()
    return db_transactions

async def get_distinct_values(db: AsyncSession, column) -> List[str]:
    query = select(column).distinct().order_by(column)
    result = await db.execute(query)
    return [value for value in result.scalars().all() if value is not None]

async def get_filter_options(db: AsyncSession) -> dict:
    return {
        "categories": await get_distinct_values(db, Transaction.category),
        "statuses": await get_distinct_values(db, Transaction.status),
        "users": await get_distinct_values(db, Transaction.user_id),
    }

async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    query = select(User).where(User.username == username)
    result = await db.execute(query)
    return result.scalars().first()

async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    query = select(User).where(User.id == user_id)
    result = await db.execute(query)
    return result.scalars().first()

async def create_user(db: AsyncSession, username: str, password_hash: str) -> User:
    db_user = User(username=username, password_hash=password_hash)
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user
