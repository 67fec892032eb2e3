from fastapi import APIRouter, Depends
from datetime import datetime, timezone
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_async_session

router = APIRouter()

@router.get("/health", summary="Health check")
async def health_check(db: AsyncSession = Depends(get_async_session)):
    """
    Health-check: приложение отвечает и база доступна.
    """
    await db.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "database": "connected",
        "timestamp": datetime.now(timezone.utc),
    }
