"""
Жизненный цикл заказа: оформление (из корзины или напрямую),
смена статуса с журналом отслеживания, выборки для клиента и ресторана.

Заказ хранит снимок позиций, адреса и сумм; после создания меняются только
статус (через update_status) и ожидаемое время доставки.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.config import settings
from meals_on_wheels.crud.cart import get_cart, is_expired
from meals_on_wheels.crud.catalog import ensure_open, find_address, find_item, find_restaurant
from meals_on_wheels.crud.common import commit_or_conflict
from meals_on_wheels.crud.order_number import next_order_number
from meals_on_wheels.crud.pricing import compute_totals, line_total, money, utcnow
from meals_on_wheels.exceptions import (
    AccessDenied,
    AddressNotFound,
    CartEmpty,
    CartExpired,
    CartNotFound,
    ConcurrentModification,
    IllegalTransition,
    ItemRestaurantMismatch,
    ItemUnavailable,
    MinimumOrderNotMet,
    OrderNotFound,
    RestaurantNotFound,
)
from meals_on_wheels.models import (
    Cart,
    CartItem,
    Order,
    OrderItem,
    OrderStatusEnum,
    PaymentMethodEnum,
    PaymentStatusEnum,
    Restaurant,
    TrackingEvent,
    User,
)
from meals_on_wheels.schemas.order import OrderLineCreate

logger = structlog.get_logger(__name__)

S = OrderStatusEnum

# Таблица допустимых переходов: вперёд по цепочке или в rejected/cancelled.
# Финальные статусы больше не меняются.
ALLOWED_TRANSITIONS = {
    S.placed: {S.confirmed, S.rejected, S.cancelled},
    S.confirmed: {S.preparing, S.rejected, S.cancelled},
    S.preparing: {S.out_for_delivery, S.rejected, S.cancelled},
    S.out_for_delivery: {S.delivered, S.rejected, S.cancelled},
    S.delivered: set(),
    S.rejected: set(),
    S.cancelled: set(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)

PLACED_MESSAGE = "Order placed successfully"


def can_transition(current, target) -> bool:
    return OrderStatusEnum(target) in ALLOWED_TRANSITIONS[OrderStatusEnum(current)]


# --- оформление заказа ---------------------------------------------------------

def _check_minimum_order(total_amount, restaurant: Restaurant) -> None:
    minimum = money(restaurant.minimum_order)
    if total_amount < minimum:
        raise MinimumOrderNotMet(f"Minimum order amount is {minimum}")


async def create_from_cart(
    db: AsyncSession,
    customer: User,
    delivery_address_id: int,
    special_instructions: Optional[str] = None,
    payment_method: Optional[PaymentMethodEnum] = None,
) -> Order:
    """
    Оформляет заказ из корзины клиента. Всё или ничего: при любой ошибке
    заказ не создаётся и корзина остаётся нетронутой (кроме просроченной,
    она удаляется).
    """
    cart = await get_cart(db, customer.id)
    if cart is None:
        raise CartNotFound()

    if is_expired(cart):
        await db.delete(cart)
        await commit_or_conflict(db, customer_id=customer.id)
        raise CartExpired()

    if not cart.items:
        raise CartEmpty()

    address = await find_address(db, customer.id, delivery_address_id)
    if address is None:
        raise AddressNotFound()

    restaurant = await find_restaurant(db, cart.restaurant_id)
    if restaurant is None:
        raise RestaurantNotFound()
    ensure_open(restaurant)

    # проверяем каждую позицию по текущему состоянию меню
    lines = []
    for cart_line in cart.items:
        item = await find_item(db, cart_line.menu_item_id)
        if item is None:
            raise ItemUnavailable(f"Item {cart_line.name} is no longer available")
        if item.is_out_of_stock:
            raise ItemUnavailable(f"Item {cart_line.name} is out of stock")
        lines.append(
            {
                "menu_item_id": cart_line.menu_item_id,
                "name": cart_line.name,
                "price": money(cart_line.unit_price),
                "quantity": cart_line.quantity,
                "line_total": line_total(cart_line.unit_price, cart_line.quantity),
                "special_instructions": cart_line.special_instructions,
            }
        )

    subtotal, delivery_fee, tax, total_amount = compute_totals(
        (line["line_total"] for line in lines), cart.delivery_fee
    )
    _check_minimum_order(total_amount, restaurant)

    draft = {
        "customer_id": customer.id,
        "restaurant_id": cart.restaurant_id,
        "items": lines,
        "delivery_address": address.snapshot(),
        "subtotal": subtotal,
        "delivery_fee": delivery_fee,
        "tax": tax,
        "total_amount": total_amount,
        "special_instructions": special_instructions,
        "payment_method": payment_method or PaymentMethodEnum.cod,
    }
    return await _place_order(db, draft, cart_ref=(cart.id, cart.version))


async def create_direct(
    db: AsyncSession,
    customer: User,
    restaurant_id: int,
    item_lines: Iterable[OrderLineCreate],
    delivery_address_id: int,
    special_instructions: Optional[str] = None,
    payment_method: Optional[PaymentMethodEnum] = None,
) -> Order:
    """Заказ по явному списку позиций, суммы считаются заново по ценам меню."""
    restaurant = await find_restaurant(db, restaurant_id)
    if restaurant is None:
        raise RestaurantNotFound()
    ensure_open(restaurant)

    address = await find_address(db, customer.id, delivery_address_id)
    if address is None:
        raise AddressNotFound()

    lines = []
    for requested in item_lines:
        item = await find_item(db, requested.item_id)
        if item is None:
            raise ItemUnavailable(f"Item {requested.item_id} not found")
        if item.restaurant_id != restaurant.id:
            raise ItemRestaurantMismatch(f"Item {item.name} does not belong to this restaurant")
        if item.is_out_of_stock:
            raise ItemUnavailable(f"Item {item.name} is out of stock")
        price = money(item.price)
        lines.append(
            {
                "menu_item_id": item.id,
                "name": item.name,
                "price": price,
                "quantity": requested.quantity,
                "line_total": line_total(price, requested.quantity),
                "special_instructions": requested.special_instructions,
            }
        )

    subtotal, delivery_fee, tax, total_amount = compute_totals(
        (line["line_total"] for line in lines), restaurant.delivery_fee
    )
    _check_minimum_order(total_amount, restaurant)

    draft = {
        "customer_id": customer.id,
        "restaurant_id": restaurant.id,
        "items": lines,
        "delivery_address": address.snapshot(),
        "subtotal": subtotal,
        "delivery_fee": delivery_fee,
        "tax": tax,
        "total_amount": total_amount,
        "special_instructions": special_instructions,
        "payment_method": payment_method or PaymentMethodEnum.cod,
    }
    return await _place_order(db, draft)


async def _delete_checked_out_cart(db: AsyncSession, cart_id: int, version: int) -> None:
    """
    Удаляет корзину только если её версия не изменилась с момента проверки,
    иначе заказ был бы оформлен по устаревшему содержимому.
    """
    carts = Cart.__table__
    result = await db.execute(delete(carts).where(carts.c.id == cart_id, carts.c.version == version))
    if result.rowcount != 1:
        raise ConcurrentModification("Cart was modified during checkout, review it and retry")
    cart_items = CartItem.__table__
    await db.execute(delete(cart_items).where(cart_items.c.cart_id == cart_id))


async def _place_order(db: AsyncSession, draft: dict, cart_ref: Optional[Tuple[int, int]] = None) -> Order:
    """
    Одна транзакция: номер заказа, заказ с позициями и первым событием
    отслеживания, удаление корзины. При коллизии номера транзакция откатывается и повторяется.
    """
    attempts = max(1, settings.ORDER_NUMBER_MAX_RETRIES)
    for attempt in range(1, attempts + 1):
        now = utcnow()
        try:
            order_number = await next_order_number(db, now)
            order = Order(
                order_number=order_number,
                customer_id=draft["customer_id"],
                restaurant_id=draft["restaurant_id"],
                delivery_address=draft["delivery_address"],
                subtotal=draft["subtotal"],
                delivery_fee=draft["delivery_fee"],
                tax=draft["tax"],
                total_amount=draft["total_amount"],
                status=OrderStatusEnum.placed,
                payment_method=draft["payment_method"],
                payment_status=PaymentStatusEnum.pending,
                special_instructions=draft["special_instructions"],
                created_at=now,
                updated_at=now,
                items=[OrderItem(**line) for line in draft["items"]],
                tracking_history=[
                    TrackingEvent(status=OrderStatusEnum.placed, message=PLACED_MESSAGE, timestamp=now)
                ],
            )
            db.add(order)
            await db.flush()
            if cart_ref is not None:
                await _delete_checked_out_cart(db, *cart_ref)
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if attempt == attempts:
                logger.error("Order number allocation failed", attempts=attempts, error=str(exc))
                raise ConcurrentModification("Could not allocate a unique order number, retry the request") from exc
            logger.warning("Order number collision, retrying", attempt=attempt, error=str(exc))
            continue
        except ConcurrentModification:
            await db.rollback()
            raise

        logger.info(
            "Order placed",
            order_id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            restaurant_id=order.restaurant_id,
            total_amount=str(order.total_amount),
            from_cart=cart_ref is not None,
        )
        return order


# --- смена статуса ---------------------------------------------------------------

async def update_status(
    db: AsyncSession,
    order: Order,
    new_status,
    message: str,
    actor: Optional[User] = None,
    estimated_delivery_time: Optional[datetime] = None,
) -> Order:
    """
    Переводит заказ в новый статус и дописывает событие в журнал.
    Журнал только растёт: ровно одно новое событие на вызов.
    """
    current = OrderStatusEnum(order.status)
    target = OrderStatusEnum(new_status)
    if not can_transition(current, target):
        raise IllegalTransition(f"Cannot change order status from {current.value} to {target.value}")

    now = utcnow()
    order.tracking_history.append(
        TrackingEvent(
            status=target,
            message=message,
            updated_by_id=actor.id if actor is not None else None,
            timestamp=now,
        )
    )
    order.status = target

    if target == OrderStatusEnum.delivered:
        order.actual_delivery_time = now
    elif target == OrderStatusEnum.rejected:
        order.rejection_reason = message
    elif target == OrderStatusEnum.cancelled:
        order.cancellation_reason = message

    if estimated_delivery_time is not None:
        order.estimated_delivery_time = estimated_delivery_time

    order.updated_at = now
    await commit_or_conflict(db, order_id=order.id)

    logger.info(
        "Order status changed",
        order_id=order.id,
        order_number=order.order_number,
        from_status=current.value,
        to_status=target.value,
        updated_by=actor.id if actor is not None else None,
    )
    return order


def tracking_view(order: Order) -> dict:
    return {
        "order_number": order.order_number,
        "status": order.status,
        "tracking_history": list(order.tracking_history),
        "estimated_delivery_time": order.estimated_delivery_time,
        "actual_delivery_time": order.actual_delivery_time,
    }


# --- выборки ----------------------------------------------------------------------

async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
    """
    Возвращает заказ по ID с подгруженными items и tracking_history.
    """
    stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_customer_order(db: AsyncSession, customer: User, order_id: int) -> Order:
    order = await get_order_by_id(db, order_id)
    if order is None:
        raise OrderNotFound()
    if order.customer_id != customer.id:
        raise AccessDenied("Access denied - you can only view your own orders")
    return order


async def get_restaurant_order(db: AsyncSession, restaurant: Restaurant, order_id: int) -> Order:
    order = await get_order_by_id(db, order_id)
    if order is None or order.restaurant_id != restaurant.id:
        raise OrderNotFound()
    return order


async def get_orders(
    db: AsyncSession,
    customer_id: Optional[int] = None,
    restaurant_id: Optional[int] = None,
    status: Optional[OrderStatusEnum] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> Tuple[List[Order], int]:
    """
    Возвращает страницу заказов и общее количество по тем же фильтрам.
    Сортируем по created_at (новые первыми).
    """
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    conditions = []
    if customer_id is not None:
        conditions.append(Order.customer_id == customer_id)
    if restaurant_id is not None:
        conditions.append(Order.restaurant_id == restaurant_id)
    if status:
        conditions.append(Order.status == status)
    if date_from:
        conditions.append(Order.created_at >= date_from)
    if date_to:
        conditions.append(Order.created_at <= date_to)

    stmt = (
        select(Order)
        .where(*conditions)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(stmt)
    orders = result.scalars().unique().all()

    total = await db.scalar(select(func.count(Order.id)).where(*conditions))
    return orders, total or 0
