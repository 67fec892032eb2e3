"""
Номер заказа: ORD + YYMMDD + порядковый номер за день (4 цифры).

Порядковый номер берётся из атомарного счётчика order_counters в той же
транзакции, что и вставка заказа, поэтому откат заказа откатывает и счётчик.
"""
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.models import Order, OrderCounter

ORDER_NUMBER_PREFIX = "ORD"


def day_key(now: datetime) -> str:
    """Ключ дня в локальном времени сервера: YYMMDD."""
    return now.astimezone().strftime("%y%m%d")


def format_order_number(day: str, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}{day}{sequence:04d}"


async def _last_issued(db: AsyncSession, day: str) -> int:
    """Последний уже выданный номер дня по таблице заказов (0, если заказов нет)."""
    prefix = f"{ORDER_NUMBER_PREFIX}{day}"
    last = await db.scalar(select(func.max(Order.order_number)).where(Order.order_number.like(f"{prefix}%")))
    if not last:
        return 0
    return int(last[len(prefix):])


async def next_sequence(db: AsyncSession, day: str) -> int:
    """
    Атомарный инкремент счётчика дня (UPDATE ... RETURNING).
    Первый заказ дня вставляет строку счётчика, продолжая уже выданные номера;
    гонка двух первых заказов даёт IntegrityError, повтор делает crud.order.
    """
    stmt = (
        update(OrderCounter)
        .where(OrderCounter.day == day)
        .values(last_value=OrderCounter.last_value + 1)
        .returning(OrderCounter.last_value)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    value = result.scalar_one_or_none()
    if value is None:
        value = await _last_issued(db, day) + 1
        db.add(OrderCounter(day=day, last_value=value))
        await db.flush()
    return value


async def next_order_number(db: AsyncSession, now: datetime) -> str:
    day = day_key(now)
    return format_order_number(day, await next_sequence(db, day))
