from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.crud.catalog import (
    add_menu_item,
    delete_menu_item,
    get_menu_items,
    get_owner_restaurant,
    update_menu_item,
    update_restaurant_settings,
    upsert_restaurant,
)
from meals_on_wheels.crud.order import get_orders, get_restaurant_order, update_status
from meals_on_wheels.db.deps import require_restaurant_owner
from meals_on_wheels.db.session import get_async_session
from meals_on_wheels.models import OrderStatusEnum, User
from meals_on_wheels.schemas.menu_item import MenuItemCreate, MenuItemRead, MenuItemUpdate
from meals_on_wheels.schemas.order import OrderList, OrderRead, OrderStatusUpdate, Pagination
from meals_on_wheels.schemas.restaurant import RestaurantRead, RestaurantSettingsUpdate, RestaurantUpsert


router = APIRouter(prefix="/restaurant", tags=["restaurant"])


# --- профиль и настройки ---------------------------------------------------------

@router.get("", response_model=RestaurantRead)
async def read_restaurant(
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_owner_restaurant(db, owner)


@router.post("", response_model=RestaurantRead)
async def save_restaurant(
    restaurant_in: RestaurantUpsert,
    response: Response,
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Создаёт ресторан владельца (201) или перезаписывает профиль существующего (200).
    """
    restaurant, created = await upsert_restaurant(db, owner, restaurant_in)
    if created:
        response.status_code = 201
    return restaurant


@router.get("/settings", response_model=RestaurantRead)
async def read_settings(
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_owner_restaurant(db, owner)


@router.put("/settings", response_model=RestaurantRead)
async def edit_settings(
    settings_in: RestaurantSettingsUpdate,
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Стоимость доставки, минимальный заказ, приём заказов (is_active).
    Уже оформленные заказы не пересчитываются.
    """
    return await update_restaurant_settings(db, owner, settings_in)


# --- меню ------------------------------------------------------------------------

@router.get("/menu", response_model=List[MenuItemRead])
async def list_menu(
    category: Optional[str] = Query(None, description="Фильтр по категории"),
    include_out_of_stock: bool = Query(True, description="Показывать позиции, которых нет в наличии"),
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    restaurant = await get_owner_restaurant(db, owner)
    return await get_menu_items(db, restaurant, category=category, include_out_of_stock=include_out_of_stock)


@router.post("/menu", response_model=MenuItemRead, status_code=201)
async def create_menu_item(
    item_in: MenuItemCreate,
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    restaurant = await get_owner_restaurant(db, owner)
    return await add_menu_item(db, restaurant, item_in)


@router.put("/menu/{item_id}", response_model=MenuItemRead)
async def edit_menu_item(
    item_in: MenuItemUpdate,
    item_id: int = Path(..., description="ID позиции меню"),
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Частичное обновление позиции, в том числе отметка «нет в наличии».
    """
    restaurant = await get_owner_restaurant(db, owner)
    return await update_menu_item(db, restaurant, item_id, item_in)


@router.delete("/menu/{item_id}")
async def remove_menu_item(
    item_id: int = Path(..., description="ID позиции меню"),
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    restaurant = await get_owner_restaurant(db, owner)
    await delete_menu_item(db, restaurant, item_id)
    return {"message": "Menu item deleted successfully"}


# --- заказы ----------------------------------------------------------------------

@router.get("/orders", response_model=OrderList)
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    date_from: Optional[datetime] = Query(None, description="Начальная дата (ISO)"),
    date_to: Optional[datetime] = Query(None, description="Конечная дата (ISO)"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=50, description="Размер страницы"),
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Заказы ресторана с фильтрацией по статусу и диапазону дат и пагинацией.
    """
    restaurant = await get_owner_restaurant(db, owner)
    orders, total = await get_orders(
        db,
        restaurant_id=restaurant.id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return OrderList(
        orders=[OrderRead.model_validate(o) for o in orders],
        pagination=Pagination(page=page, limit=limit, total=total, pages=-(-total // limit)),
    )


@router.get("/orders/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int = Path(..., description="ID заказа"),
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    restaurant = await get_owner_restaurant(db, owner)
    return await get_restaurant_order(db, restaurant, order_id)


@router.patch("/orders/{order_id}/status", response_model=OrderRead)
async def patch_order_status(
    status_in: OrderStatusUpdate,
    order_id: int = Path(..., description="ID заказа"),
    owner: User = Depends(require_restaurant_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Смена статуса заказа владельцем ресторана.
    Допустимы только переходы вперёд по цепочке или в rejected/cancelled.
    """
    restaurant = await get_owner_restaurant(db, owner)
    order = await get_restaurant_order(db, restaurant, order_id)
    return await update_status(
        db,
        order,
        status_in.status,
        status_in.message,
        actor=owner,
        estimated_delivery_time=status_in.estimated_delivery_time,
    )
