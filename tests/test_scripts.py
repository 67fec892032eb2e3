"""Служебные скрипты: очистка просроченных корзин и демо-данные."""

from datetime import timedelta

from sqlalchemy import func, select

from meals_on_wheels.crud import cart as cart_crud
from meals_on_wheels.crud.pricing import utcnow
from meals_on_wheels.models import MenuItem, User
from meals_on_wheels.scripts import clean_expired_carts as clean_module
from meals_on_wheels.scripts.seed import MENU, seed


async def test_clean_expired_carts(db, world, engine, session_factory, monkeypatch):
    cart = await cart_crud.add_item(db, world.customer, world.naan.id)
    await cart_crud.add_item(db, world.other_customer, world.dosa.id)
    cart.expires_at = utcnow() - timedelta(hours=1)
    await db.commit()

    monkeypatch.setattr(clean_module, "AsyncSessionLocal", session_factory)
    monkeypatch.setattr(clean_module, "engine", engine)

    assert await clean_module.clean_expired_carts() == 1
    assert await cart_crud.get_cart(db, world.customer.id) is None
    assert await cart_crud.get_cart(db, world.other_customer.id) is not None


async def test_seed_is_idempotent(db):
    tokens = await seed(db)

    assert set(tokens) == {"customer", "restaurant_owner"}
    assert await db.scalar(select(func.count(MenuItem.id))) == len(MENU)

    assert await seed(db) == {}
    assert await db.scalar(select(func.count(User.id))) == 2
