import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from meals_on_wheels.exceptions import ConcurrentModification

logger = structlog.get_logger(__name__)


async def commit_or_conflict(db: AsyncSession, **context) -> None:
    """
    Коммит с проверкой версии (version_id_col) и уникальных ограничений.
    Проигравший в гонке писатель получает ConcurrentModification вместо
    молчаливой перезаписи чужих изменений.
    """
    await _write_or_conflict(db, db.commit, context)


async def flush_or_conflict(db: AsyncSession, **context) -> None:
    await _write_or_conflict(db, db.flush, context)


async def _write_or_conflict(db: AsyncSession, write, context) -> None:
    try:
        await write()
    except (StaleDataError, IntegrityError) as exc:
        await db.rollback()
        logger.warning("Concurrent modification detected", error=str(exc), **context)
        raise ConcurrentModification() from exc
