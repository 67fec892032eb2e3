import os

# настройки читаются при импорте приложения
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

import secrets
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from meals_on_wheels.db.base import Base
from meals_on_wheels.db.session import get_async_session
from meals_on_wheels.main import app
from meals_on_wheels.models import Address, MenuItem, Restaurant, RoleEnum, User


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _user(name, email, role=RoleEnum.customer, is_active=True):
    return User(
        name=name,
        email=email,
        phone="9876543210",
        role=role,
        api_token=secrets.token_urlsafe(16),
        is_active=is_active,
    )


@pytest_asyncio.fixture
async def world(db):
    """
    Два ресторана, владельцы, два клиента и адрес первого клиента.
    Ресторан 1: доставка 30, минимальный заказ 150.
    """
    customer = _user("Asha Verma", "asha@example.com")
    other_customer = _user("Vikram Rao", "vikram@example.com")
    owner = _user("Ravi Kumar", "ravi@example.com", RoleEnum.restaurant_owner)
    other_owner = _user("Meena Iyer", "meena@example.com", RoleEnum.restaurant_owner)
    inactive = _user("Old Account", "old@example.com", is_active=False)
    db.add_all([customer, other_customer, owner, other_owner, inactive])
    await db.flush()

    restaurant = Restaurant(
        owner_id=owner.id,
        name="Spice Garden",
        delivery_fee=Decimal("30.00"),
        minimum_order=Decimal("150.00"),
    )
    other_restaurant = Restaurant(
        owner_id=other_owner.id,
        name="Dosa Corner",
        delivery_fee=Decimal("20.00"),
        minimum_order=Decimal("0.00"),
    )
    db.add_all([restaurant, other_restaurant])
    await db.flush()

    biryani = MenuItem(restaurant_id=restaurant.id, name="Chicken Biryani", category="Main Course", price=Decimal("350.00"))
    naan = MenuItem(restaurant_id=restaurant.id, name="Butter Naan", category="Breads", price=Decimal("30.00"))
    jamun = MenuItem(
        restaurant_id=restaurant.id, name="Gulab Jamun", category="Desserts", price=Decimal("90.00"), is_out_of_stock=True
    )
    dosa = MenuItem(restaurant_id=other_restaurant.id, name="Masala Dosa", category="Main Course", price=Decimal("120.00"))
    db.add_all([biryani, naan, jamun, dosa])
    await db.flush()

    address = Address(
        user_id=customer.id,
        name="Asha Verma",
        phone="9876543210",
        address="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
        is_default=True,
    )
    other_address = Address(
        user_id=other_customer.id,
        name="Vikram Rao",
        phone="9876500000",
        address="4 Church Street",
        city="Bengaluru",
        state="Karnataka",
        pincode="560002",
        is_default=True,
    )
    db.add_all([address, other_address])
    await db.commit()

    return SimpleNamespace(
        customer=customer,
        other_customer=other_customer,
        owner=owner,
        other_owner=other_owner,
        inactive=inactive,
        restaurant=restaurant,
        other_restaurant=other_restaurant,
        biryani=biryani,
        naan=naan,
        jamun=jamun,
        dosa=dosa,
        address=address,
        other_address=other_address,
    )


@pytest.fixture
def auth():
    """Заголовок Authorization для пользователя."""

    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {user.api_token}"}

    return _headers
