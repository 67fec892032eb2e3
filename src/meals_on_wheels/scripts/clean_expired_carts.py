"""
Удаление просроченных корзин.

Запуск: python -m meals_on_wheels.scripts.clean_expired_carts
"""
import asyncio

import structlog

from meals_on_wheels.crud.cart import delete_expired
from meals_on_wheels.db.session import AsyncSessionLocal, engine
from meals_on_wheels.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


async def clean_expired_carts() -> int:
    try:
        async with AsyncSessionLocal() as session:
            removed = await delete_expired(session)
    finally:
        await engine.dispose()

    if removed:
        logger.info("Expired carts cleaned successfully", count=removed)
    else:
        logger.info("No expired carts found")
    return removed


def main() -> None:
    configure_logging()
    asyncio.run(clean_expired_carts())


if __name__ == "__main__":
    main()
