"""
Демо-данные: клиент, владелец ресторана, ресторан с меню, адрес доставки.

Запуск: python -m meals_on_wheels.scripts.seed
Токены пользователей выводятся в лог, их передают в Authorization: Bearer <token>.
"""
import asyncio
import secrets
from decimal import Decimal

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.db.session import AsyncSessionLocal, engine
from meals_on_wheels.models import Address, MenuItem, Restaurant, RoleEnum, User
from meals_on_wheels.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

MENU = [
    {"name": "Paneer Butter Masala", "category": "Main Course", "price": Decimal("280.00"), "is_vegetarian": True},
    {"name": "Chicken Biryani", "category": "Main Course", "price": Decimal("350.00")},
    {"name": "Butter Naan", "category": "Breads", "price": Decimal("30.00"), "is_vegetarian": True},
    {"name": "Gulab Jamun", "category": "Desserts", "price": Decimal("90.00"), "is_vegetarian": True},
    {"name": "Masala Chai", "category": "Beverages", "price": Decimal("40.00"), "is_vegetarian": True},
]


async def seed(session: AsyncSession) -> dict:
    users_count = await session.scalar(select(func.count(User.id)))
    if users_count:
        logger.info("Database already seeded", users=users_count)
        return {}

    customer = User(
        name="Asha Verma",
        email="asha@example.com",
        phone="9876543210",
        role=RoleEnum.customer,
        api_token=secrets.token_urlsafe(32),
    )
    owner = User(
        name="Ravi Kumar",
        email="ravi@example.com",
        phone="9876500000",
        role=RoleEnum.restaurant_owner,
        api_token=secrets.token_urlsafe(32),
    )
    session.add_all([customer, owner])
    await session.flush()

    restaurant = Restaurant(
        owner_id=owner.id,
        name="Spice Garden",
        description="North Indian kitchen",
        phone="9876500001",
        delivery_fee=Decimal("30.00"),
        minimum_order=Decimal("150.00"),
    )
    session.add(restaurant)
    await session.flush()

    session.add_all(MenuItem(restaurant_id=restaurant.id, **item) for item in MENU)
    session.add(
        Address(
            user_id=customer.id,
            name="Asha Verma",
            phone="9876543210",
            address="12 MG Road",
            city="Bengaluru",
            state="Karnataka",
            pincode="560001",
            is_default=True,
        )
    )
    await session.commit()

    tokens = {"customer": customer.api_token, "restaurant_owner": owner.api_token}
    logger.info("Database seeded", restaurant_id=restaurant.id, menu_items=len(MENU), **tokens)
    return tokens


async def run() -> None:
    try:
        async with AsyncSessionLocal() as session:
            await seed(session)
    finally:
        await engine.dispose()


def main() -> None:
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
