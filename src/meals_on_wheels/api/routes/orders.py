from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.crud.order import create_direct, get_customer_order, get_orders, tracking_view
from meals_on_wheels.db.deps import require_customer
from meals_on_wheels.db.session import get_async_session
from meals_on_wheels.models import OrderStatusEnum, User
from meals_on_wheels.schemas.order import OrderCreate, OrderList, OrderRead, OrderTrackingRead, Pagination


router = APIRouter(prefix="/customer/orders", tags=["customer orders"])


@router.post("", response_model=OrderRead, status_code=201)
async def place_order(
    order_in: OrderCreate,
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Заказ напрямую по списку позиций, минуя корзину.
    """
    return await create_direct(
        db,
        customer,
        order_in.restaurant_id,
        order_in.items,
        order_in.delivery_address_id,
        special_instructions=order_in.special_instructions,
        payment_method=order_in.payment_method,
    )


@router.get("", response_model=OrderList)
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=50, description="Размер страницы"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Заказы клиента, новые первыми.
    """
    orders, total = await get_orders(db, customer_id=customer.id, status=status, page=page, limit=limit)
    return OrderList(
        orders=[OrderRead.model_validate(o) for o in orders],
        pagination=Pagination(page=page, limit=limit, total=total, pages=-(-total // limit)),
    )


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int = Path(..., description="ID заказа"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_customer_order(db, customer, order_id)


@router.get("/{order_id}/track", response_model=OrderTrackingRead)
async def track_order(
    order_id: int = Path(..., description="ID заказа"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Статус заказа и журнал отслеживания.
    """
    order = await get_customer_order(db, customer, order_id)
    return tracking_view(order)
