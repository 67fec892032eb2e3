"""
Корзина клиента: одна активная корзина на клиента, один ресторан на корзину.

Суммы всегда пересчитываются из позиций (pricing.apply_totals) и никогда
не меняются напрямую. Просроченная корзина удаляется лениво при любом
обращении к ней.
"""
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.config import settings
from meals_on_wheels.crud.catalog import ensure_open, find_item, find_restaurant
from meals_on_wheels.crud.common import commit_or_conflict, flush_or_conflict
from meals_on_wheels.crud.pricing import apply_totals, as_utc, line_total, money, utcnow
from meals_on_wheels.exceptions import (
    CartExpired,
    CartItemNotFound,
    CartNotFound,
    ConcurrentModification,
    InvalidQuantity,
    ItemNotFound,
    ItemUnavailable,
    RestaurantMismatch,
    RestaurantNotFound,
)
from meals_on_wheels.models import Cart, CartItem, User

logger = structlog.get_logger(__name__)


def is_expired(cart: Cart, now: Optional[datetime] = None) -> bool:
    return as_utc(cart.expires_at) < (now or utcnow())


async def get_cart(db: AsyncSession, customer_id: int) -> Optional[Cart]:
    stmt = (
        select(Cart)
        .where(Cart.customer_id == customer_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def _get_live_cart(db: AsyncSession, customer: User, now: datetime) -> Cart:
    """Корзина для изменения: нет корзины -> 404, просрочена -> удаляем и 400."""
    cart = await get_cart(db, customer.id)
    if cart is None:
        raise CartNotFound()
    if is_expired(cart, now):
        await db.delete(cart)
        await commit_or_conflict(db, customer_id=customer.id)
        logger.info("Expired cart discarded", customer_id=customer.id, cart_id=cart.id)
        raise CartExpired()
    return cart


def _find_line(cart: Cart, item_id: int) -> Optional[CartItem]:
    return next((line for line in cart.items if line.menu_item_id == item_id), None)


async def add_item(
    db: AsyncSession,
    customer: User,
    item_id: int,
    quantity: int = 1,
    special_instructions: Optional[str] = None,
) -> Cart:
    """
    Добавляет позицию в корзину.
    Повторное добавление той же позиции складывает количество,
    special_instructions перезаписываются только если переданы.
    """
    if quantity < 1:
        raise InvalidQuantity()

    item = await find_item(db, item_id)
    if item is None:
        raise ItemNotFound()
    if item.is_out_of_stock:
        raise ItemUnavailable()

    restaurant = await find_restaurant(db, item.restaurant_id)
    if restaurant is None:
        raise RestaurantNotFound()
    ensure_open(restaurant)

    now = utcnow()
    cart = await get_cart(db, customer.id)

    # просроченная корзина молча заменяется новой
    if cart is not None and is_expired(cart, now):
        logger.info("Expired cart replaced", customer_id=customer.id, cart_id=cart.id)
        await db.delete(cart)
        await flush_or_conflict(db, customer_id=customer.id)
        cart = None

    if cart is not None and cart.restaurant_id != item.restaurant_id:
        raise RestaurantMismatch()

    if cart is None:
        cart = Cart(
            customer_id=customer.id,
            restaurant_id=item.restaurant_id,
            delivery_fee=money(restaurant.delivery_fee),
            created_at=now,
            updated_at=now,
            expires_at=now + timedelta(hours=settings.CART_TTL_HOURS),
            items=[],
        )
        db.add(cart)
        logger.info("Cart created", customer_id=customer.id, restaurant_id=item.restaurant_id)

    line = _find_line(cart, item.id)
    if line is not None:
        line.quantity += quantity
        if special_instructions:
            line.special_instructions = special_instructions
    else:
        unit_price = money(item.price)
        cart.items.append(
            CartItem(
                menu_item_id=item.id,
                name=item.name,
                unit_price=unit_price,
                quantity=quantity,
                special_instructions=special_instructions,
                line_total=line_total(unit_price, quantity),
            )
        )

    apply_totals(cart)
    cart.updated_at = now
    await commit_or_conflict(db, customer_id=customer.id)
    return cart


async def update_quantity(db: AsyncSession, customer: User, item_id: int, quantity: int) -> Cart:
    if quantity < 1:
        raise InvalidQuantity()

    now = utcnow()
    cart = await _get_live_cart(db, customer, now)

    line = _find_line(cart, item_id)
    if line is None:
        raise CartItemNotFound()

    item = await find_item(db, item_id)
    if item is None or item.is_out_of_stock:
        raise ItemUnavailable("Item is no longer available")

    line.quantity = quantity
    apply_totals(cart)
    cart.updated_at = now
    await commit_or_conflict(db, customer_id=customer.id)
    return cart


async def remove_item(db: AsyncSession, customer: User, item_id: int) -> Cart:
    now = utcnow()
    cart = await _get_live_cart(db, customer, now)

    line = _find_line(cart, item_id)
    if line is None:
        raise CartItemNotFound()

    cart.items.remove(line)
    apply_totals(cart)
    cart.updated_at = now
    await commit_or_conflict(db, customer_id=customer.id)
    return cart


async def clear(db: AsyncSession, customer: User) -> bool:
    """Идемпотентно: без корзины ничего не делает. Возвращает True, если корзина была удалена."""
    cart = await get_cart(db, customer.id)
    if cart is None:
        return False
    await db.delete(cart)
    await commit_or_conflict(db, customer_id=customer.id)
    return True


async def view(db: AsyncSession, customer: User) -> Optional[Cart]:
    """
    Текущая корзина клиента или None (пустая корзина).
    Побочные эффекты чтения: удаление просроченной корзины и
    выбрасывание позиций, которых больше нет в меню или нет в наличии.
    Если параллельная запись победила, её результат проверяется заново.
    """
    customer_id = customer.id
    try:
        return await _reconcile(db, customer_id)
    except ConcurrentModification:
        logger.info("Cart changed while reading, checking again", customer_id=customer_id)
        return await _reconcile(db, customer_id)


async def _reconcile(db: AsyncSession, customer_id: int) -> Optional[Cart]:
    now = utcnow()
    cart = await get_cart(db, customer_id)
    if cart is None:
        return None

    if is_expired(cart, now):
        await db.delete(cart)
        await commit_or_conflict(db, customer_id=customer_id)
        logger.info("Expired cart evicted on read", customer_id=customer_id, cart_id=cart.id)
        return None

    dropped = []
    for line in cart.items:
        item = await find_item(db, line.menu_item_id)
        if item is None or item.is_out_of_stock:
            dropped.append(line)

    if dropped:
        for line in dropped:
            cart.items.remove(line)
        apply_totals(cart)
        cart.updated_at = now
        await commit_or_conflict(db, customer_id=customer_id)
        logger.info(
            "Unavailable items dropped from cart",
            customer_id=customer_id,
            cart_id=cart.id,
            dropped=[line.menu_item_id for line in dropped],
        )

    return cart


async def delete_expired(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Удаляет все просроченные корзины, возвращает их количество."""
    now = now or utcnow()
    result = await db.execute(select(Cart).where(Cart.expires_at < now))
    carts = result.scalars().all()
    for cart in carts:
        await db.delete(cart)
    await db.commit()
    logger.info("Expired carts removed", count=len(carts))
    return len(carts)
