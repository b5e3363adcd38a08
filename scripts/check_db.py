# scripts/check_db.py
import asyncio

from sqlalchemy import func, select, text

from rateboard.infrastructure.database.models import CurrencyRateRecord
from rateboard.infrastructure.database.session import get_engine, get_sessionmaker, init_models


async def check_connection():
    async with get_engine().begin() as conn:
        result = await conn.execute(text("SELECT 1"))
        print("DB Connected:", result.scalar())

    await init_models()
    async with get_sessionmaker()() as session:
        count = await session.scalar(select(func.count()).select_from(CurrencyRateRecord))
        print("Currency records:", count)

    await get_engine().dispose()

asyncio.run(check_connection())
