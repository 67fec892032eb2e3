from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.crud.catalog import find_address
from meals_on_wheels.exceptions import AddressNotFound
from meals_on_wheels.models import Address, User
from meals_on_wheels.schemas.address import AddressCreate, AddressUpdate


async def get_addresses(db: AsyncSession, customer: User) -> List[Address]:
    result = await db.execute(select(Address).where(Address.user_id == customer.id).order_by(Address.id))
    return result.scalars().all()


async def _clear_default(db: AsyncSession, customer: User) -> None:
    for address in await get_addresses(db, customer):
        address.is_default = False


async def add_address(db: AsyncSession, customer: User, address_in: AddressCreate) -> Address:
    """
    Первый адрес клиента всегда становится адресом по умолчанию.
    """
    existing = await get_addresses(db, customer)
    data = address_in.dict()
    if not existing or data["is_default"]:
        await _clear_default(db, customer)
        data["is_default"] = True

    address = Address(user_id=customer.id, **data)
    db.add(address)
    await db.commit()
    await db.refresh(address)
    return address


async def update_address(db: AsyncSession, customer: User, address_id: int, address_in: AddressUpdate) -> Address:
    address = await find_address(db, customer.id, address_id)
    if address is None:
        raise AddressNotFound("Address not found")

    update_data = address_in.dict(exclude_unset=True)
    if update_data.get("is_default"):
        await _clear_default(db, customer)

    for key, value in update_data.items():
        setattr(address, key, value)

    await db.commit()
    await db.refresh(address)
    return address


async def delete_address(db: AsyncSession, customer: User, address_id: int) -> None:
    """
    Удаляет адрес. Если удалён адрес по умолчанию, им становится первый оставшийся.
    Уже оформленные заказы хранят свою копию адреса и не затрагиваются.
    """
    address = await find_address(db, customer.id, address_id)
    if address is None:
        raise AddressNotFound("Address not found")

    was_default = address.is_default
    await db.delete(address)
    await db.flush()

    if was_default:
        remaining = await get_addresses(db, customer)
        if remaining:
            remaining[0].is_default = True

    await db.commit()
