from typing import List, Optional, Tuple

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.exceptions import ItemNotFound, RestaurantClosed, RestaurantNotFound
from meals_on_wheels.models import Address, MenuItem, Restaurant, User
from meals_on_wheels.schemas.menu_item import MenuItemCreate, MenuItemUpdate
from meals_on_wheels.schemas.restaurant import RestaurantSettingsUpdate, RestaurantUpsert

logger = structlog.get_logger(__name__)


async def find_item(db: AsyncSession, item_id: int) -> Optional[MenuItem]:
    return await db.get(MenuItem, item_id)


async def find_restaurant(db: AsyncSession, restaurant_id: int) -> Optional[Restaurant]:
    return await db.get(Restaurant, restaurant_id)


async def find_address(db: AsyncSession, customer_id: int, address_id: int) -> Optional[Address]:
    """Адрес ищется только в адресной книге самого клиента."""
    stmt = select(Address).where(Address.id == address_id, Address.user_id == customer_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_owner_restaurant(db: AsyncSession, owner: User) -> Restaurant:
    result = await db.execute(select(Restaurant).where(Restaurant.owner_id == owner.id))
    restaurant = result.scalars().first()
    if restaurant is None:
        raise RestaurantNotFound()
    return restaurant


def ensure_open(restaurant: Restaurant) -> None:
    """Выключенный ресторан не принимает новые корзины и заказы."""
    if not restaurant.is_active:
        raise RestaurantClosed()


# --- профиль ресторана ---------------------------------------------------------

async def upsert_restaurant(db: AsyncSession, owner: User, restaurant_in: RestaurantUpsert) -> Tuple[Restaurant, bool]:
    """
    Создаёт ресторан владельца или перезаписывает его профиль.
    Возвращает (ресторан, создан_ли_он).
    """
    result = await db.execute(select(Restaurant).where(Restaurant.owner_id == owner.id))
    restaurant = result.scalars().first()
    created = restaurant is None
    if created:
        restaurant = Restaurant(owner_id=owner.id)
        db.add(restaurant)

    for key, value in restaurant_in.dict().items():
        setattr(restaurant, key, value)

    await db.commit()
    await db.refresh(restaurant)
    logger.info("Restaurant saved", restaurant_id=restaurant.id, owner_id=owner.id, created=created)
    return restaurant, created


async def update_restaurant_settings(
    db: AsyncSession, owner: User, settings_in: RestaurantSettingsUpdate
) -> Restaurant:
    """
    Частичное обновление настроек. Новая стоимость доставки попадает только
    в новые корзины, оформленные заказы хранят свои суммы.
    """
    restaurant = await get_owner_restaurant(db, owner)
    changes = settings_in.dict(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(restaurant, key, value)

    await db.commit()
    await db.refresh(restaurant)
    logger.info("Restaurant settings updated", restaurant_id=restaurant.id, fields=sorted(changes))
    return restaurant


# --- управление меню владельцем ресторана -------------------------------------

async def get_menu_items(
    db: AsyncSession,
    restaurant: Restaurant,
    category: Optional[str] = None,
    include_out_of_stock: bool = True,
) -> List[MenuItem]:
    stmt = select(MenuItem).where(MenuItem.restaurant_id == restaurant.id).order_by(MenuItem.category, MenuItem.id)
    if category:
        stmt = stmt.where(MenuItem.category == category)
    if not include_out_of_stock:
        stmt = stmt.where(MenuItem.is_out_of_stock.is_(False))
    result = await db.execute(stmt)
    return result.scalars().all()


async def _get_restaurant_item(db: AsyncSession, restaurant: Restaurant, item_id: int) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if item is None or item.restaurant_id != restaurant.id:
        raise ItemNotFound("Menu item not found")
    return item


async def add_menu_item(db: AsyncSession, restaurant: Restaurant, item_in: MenuItemCreate) -> MenuItem:
    item = MenuItem(restaurant_id=restaurant.id, **item_in.dict())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    logger.info("Menu item added", restaurant_id=restaurant.id, item_id=item.id)
    return item


async def update_menu_item(
    db: AsyncSession, restaurant: Restaurant, item_id: int, item_in: MenuItemUpdate
) -> MenuItem:
    """
    Частичное обновление позиции меню.
    Уже оформленные заказы не меняются: там хранится снимок цены и названия.
    """
    item = await _get_restaurant_item(db, restaurant, item_id)
    for key, value in item_in.dict(exclude_unset=True).items():
        setattr(item, key, value)
    await db.commit()
    await db.refresh(item)
    return item


async def delete_menu_item(db: AsyncSession, restaurant: Restaurant, item_id: int) -> None:
    item = await _get_restaurant_item(db, restaurant, item_id)
    await db.delete(item)
    await db.commit()
    logger.info("Menu item deleted", restaurant_id=restaurant.id, item_id=item_id)
