from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from green_essays.core.config import settings

# Базовый класс для моделей эссе
Base = declarative_base()

# Асинхронный движок; соединения проверяются перед выдачей из пула
engine = create_async_engine(
    settings.database_url,
    future=True,
    echo=settings.sql_echo,
    pool_pre_ping=True
)

# Сессии
SessionLocal = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Сессия БД на время одного запроса"""
    async with SessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    """Закрытие пула соединений при остановке приложения"""
    await engine.dispose()
