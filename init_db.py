import asyncio
import random
from datetime import datetime, timedelta
from finboard.database import engine, Base, AsyncSessionLocal
from finboard.models import Transaction, User
from finboard.crud import create_transactions
from finboard.enums import Category, Status
from finboard.security import hash_password
from sqlalchemy import select

DEMO_USERNAME = "demo_user"
DEMO_PASSWORD = "demo_password"

USER_IDS = ["user_001", "user_002", "user_003", "user_004", "user_005", "user_006"]

def build_sample_transactions(count: int = 300, seed: int = 42, start: datetime = datetime(2024, 1, 1)):
    """Generate a reproducible spread of transactions over roughly eighteen months"""
    rng = random.Random(seed)
    records = []
    for index in range(count):
        category = rng.choice([Category.REVENUE, Category.EXPENSE])
        user_id = rng.choice(USER_IDS)
        records.append({
            "id": index + 1,
            "date": start + timedelta(days=rng.randint(0, 540), minutes=rng.randint(0, 1439)),
            "amount": round(rng.uniform(10, 2000), 2),
            "category": category.value,
            "status": rng.choice([Status.PAID, Status.PENDING]).value,
            "user_id": user_id,
            "user_profile": f"https://example.com/avatars/{user_id}.png",
        })
    return records

async def init_db():
    """Create the schema and seed demo data"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Database tables created")

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.username == DEMO_USERNAME))
        if not result.scalars().first():
            session.add(User(username=DEMO_USERNAME, password_hash=hash_password(DEMO_PASSWORD)))
            await session.commit()
            print(f"Demo user '{DEMO_USERNAME}' created")

        result = await session.execute(select(Transaction).limit(1))
        if not result.scalars().first():
            records = build_sample_transactions()
            await create_transactions(session, records)
            print(f"{len(records)} sample transactions added")
        else:
            print("Transactions already present, skipping sample data")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(init_db())
