from pydantic import BaseModel, Field, conint
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from meals_on_wheels.models.order import PaymentMethodEnum


class CartItemRead(BaseModel):
    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int
    special_instructions: Optional[str] = None
    line_total: Decimal

    class Config:
        from_attributes = True


class CartRead(BaseModel):
    id: Optional[int] = None
    restaurant_id: Optional[int] = None
    items: List[CartItemRead] = []
    subtotal: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    item_count: int = 0
    expires_at: Optional[datetime] = None

    @classmethod
    def from_cart(cls, cart):
        """Проекция корзины; для None возвращает пустую корзину с нулевыми суммами."""
        if cart is None:
            return cls()
        return cls(
            id=cart.id,
            restaurant_id=cart.restaurant_id,
            items=[CartItemRead.model_validate(i) for i in cart.items],
            subtotal=cart.subtotal,
            delivery_fee=cart.delivery_fee,
            tax=cart.tax,
            total_amount=cart.total_amount,
            item_count=sum(i.quantity for i in cart.items),
            expires_at=cart.expires_at,
        )


class AddToCartRequest(BaseModel):
    item_id: int
    quantity: conint(ge=1) = 1
    special_instructions: Optional[str] = Field(None, max_length=500)


class UpdateCartItemRequest(BaseModel):
    quantity: int  # < 1 отклоняется ядром (InvalidQuantity)


class CheckoutRequest(BaseModel):
    delivery_address_id: int
    special_instructions: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[PaymentMethodEnum] = None
