"""
Общие правила расчёта сумм для корзины и заказа.

Все пути (корзина, заказ из корзины, прямой заказ) считают суммы
только через эти функции, чтобы повторные чтения не расходились.
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from meals_on_wheels.config import settings

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    """Приводит значение к Decimal с двумя знаками после запятой."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return money(money(unit_price) * quantity)


def compute_tax(subtotal) -> Decimal:
    return money(money(subtotal) * settings.TAX_RATE)


def compute_totals(line_totals: Iterable, delivery_fee) -> Tuple[Decimal, Decimal, Decimal, Decimal]:
    """
    Возвращает (subtotal, delivery_fee, tax, total_amount).
    total_amount = subtotal + delivery_fee + tax.
    """
    subtotal = money(sum((money(t) for t in line_totals), ZERO))
    fee = money(delivery_fee)
    tax = compute_tax(subtotal)
    return subtotal, fee, tax, subtotal + fee + tax


def apply_totals(cart) -> None:
    """Пересчитывает суммы корзины по текущим позициям."""
    for item in cart.items:
        item.line_total = line_total(item.unit_price, item.quantity)
    cart.subtotal, cart.delivery_fee, cart.tax, cart.total_amount = compute_totals(
        (item.line_total for item in cart.items), cart.delivery_fee
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite возвращает naive datetime, считаем его UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
