from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.crud.address import add_address, delete_address, get_addresses, update_address
from meals_on_wheels.db.deps import require_customer
from meals_on_wheels.db.session import get_async_session
from meals_on_wheels.models import User
from meals_on_wheels.schemas.address import AddressCreate, AddressRead, AddressUpdate


router = APIRouter(prefix="/customer/addresses", tags=["customer addresses"])


@router.get("", response_model=List[AddressRead])
async def list_addresses(
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    return await get_addresses(db, customer)


@router.post("", response_model=AddressRead, status_code=201)
async def create_address(
    address_in: AddressCreate,
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    return await add_address(db, customer, address_in)


@router.put("/{address_id}", response_model=AddressRead)
async def edit_address(
    address_in: AddressUpdate,
    address_id: int = Path(..., description="ID адреса"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    return await update_address(db, customer, address_id, address_in)


@router.delete("/{address_id}")
async def remove_address(
    address_id: int = Path(..., description="ID адреса"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    await delete_address(db, customer, address_id)
    return {"message": "Address deleted successfully"}
