from .user import User, RoleEnum, Address, AddressLabelEnum
from .restaurant import Restaurant
from .menu_item import MenuItem
from .cart import Cart, CartItem
from .order import (
    Order,
    OrderStatusEnum,
    PaymentMethodEnum,
    PaymentStatusEnum,
    TrackingEvent,
    OrderCounter,
)
from .order_item import OrderItem

__all__ = [
    "User",
    "RoleEnum",
    "Address",
    "AddressLabelEnum",
    "Restaurant",
    "MenuItem",
    "Cart",
    "CartItem",
    "Order",
    "OrderStatusEnum",
    "PaymentMethodEnum",
    "PaymentStatusEnum",
    "TrackingEvent",
    "OrderCounter",
    "OrderItem",
]
