from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from meals_on_wheels.config import settings


def _engine_options(url: str) -> dict:
    # у SQLite (тесты, локальный запуск) нет пула соединений для проверки
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    future=True,
    **_engine_options(settings.DATABASE_URL),
)

# expire_on_commit=False: ответы сериализуются уже после коммита
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Сессия на один запрос: Depends(get_async_session).
    Незакоммиченные изменения при ошибке откатываются.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
