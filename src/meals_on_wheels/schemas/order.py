from pydantic import BaseModel, Field, conint
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from meals_on_wheels.models.order import OrderStatusEnum, PaymentMethodEnum, PaymentStatusEnum


class OrderItemRead(BaseModel):
    menu_item_id: Optional[int] = None
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal
    special_instructions: Optional[str] = None

    class Config:
        from_attributes = True


class TrackingEventRead(BaseModel):
    status: OrderStatusEnum
    message: str
    timestamp: datetime
    updated_by_id: Optional[int] = None

    class Config:
        from_attributes = True


class DeliveryAddress(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str


class OrderRead(BaseModel):
    id: int
    order_number: str
    customer_id: int
    restaurant_id: int
    items: List[OrderItemRead] = []
    delivery_address: DeliveryAddress
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total_amount: Decimal
    status: OrderStatusEnum
    tracking_history: List[TrackingEventRead] = []
    payment_method: PaymentMethodEnum
    payment_status: PaymentStatusEnum
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    special_instructions: Optional[str] = None
    cancellation_reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderTrackingRead(BaseModel):
    order_number: str
    status: OrderStatusEnum
    tracking_history: List[TrackingEventRead]
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OrderList(BaseModel):
    orders: List[OrderRead]
    pagination: Pagination


class OrderLineCreate(BaseModel):
    item_id: int
    quantity: conint(ge=1)
    special_instructions: Optional[str] = Field(None, max_length=500)


class OrderCreate(BaseModel):
    restaurant_id: int
    delivery_address_id: int
    items: List[OrderLineCreate] = Field(..., min_length=1)
    special_instructions: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[PaymentMethodEnum] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatusEnum
    message: str = Field(..., min_length=1, max_length=500)
    estimated_delivery_time: Optional[datetime] = None

    class Config:
        extra = "forbid"
