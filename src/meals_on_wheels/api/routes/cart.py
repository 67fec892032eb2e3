from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.crud import cart as cart_crud
from meals_on_wheels.crud.order import create_from_cart
from meals_on_wheels.db.deps import require_customer
from meals_on_wheels.db.session import get_async_session
from meals_on_wheels.models import User
from meals_on_wheels.schemas.cart import AddToCartRequest, CartRead, CheckoutRequest, UpdateCartItemRequest
from meals_on_wheels.schemas.order import OrderRead


router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartRead)
async def view_cart(
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Содержимое корзины. Просроченная корзина удаляется, недоступные позиции выбрасываются.
    """
    cart = await cart_crud.view(db, customer)
    return CartRead.from_cart(cart)


@router.post("", response_model=CartRead)
async def add_to_cart(
    body: AddToCartRequest,
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    cart = await cart_crud.add_item(
        db, customer, body.item_id, quantity=body.quantity, special_instructions=body.special_instructions
    )
    return CartRead.from_cart(cart)


@router.post("/checkout", response_model=OrderRead, status_code=201)
async def checkout(
    body: CheckoutRequest,
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Оформляет заказ из корзины и удаляет корзину.
    """
    return await create_from_cart(
        db,
        customer,
        body.delivery_address_id,
        special_instructions=body.special_instructions,
        payment_method=body.payment_method,
    )


@router.put("/{item_id}", response_model=CartRead)
async def update_cart_item(
    body: UpdateCartItemRequest,
    item_id: int = Path(..., description="ID позиции меню"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    cart = await cart_crud.update_quantity(db, customer, item_id, body.quantity)
    return CartRead.from_cart(cart)


@router.delete("/{item_id}", response_model=CartRead)
async def remove_cart_item(
    item_id: int = Path(..., description="ID позиции меню"),
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    cart = await cart_crud.remove_item(db, customer, item_id)
    return CartRead.from_cart(cart)


@router.delete("")
async def clear_cart(
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_async_session),
):
    removed = await cart_crud.clear(db, customer)
    return {"message": "Cart cleared successfully" if removed else "Cart is already empty"}
