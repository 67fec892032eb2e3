"""
Типизированные ошибки ядра корзины и заказов.

Ядро только поднимает исключения, HTTP-слой переводит их в ответы
по атрибуту status_code (см. main.py).
"""


class OrderingError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# --- 404 ---------------------------------------------------------------------

class NotFoundError(OrderingError):
    status_code = 404
    default_detail = "Not found"


class ItemNotFound(NotFoundError):
    default_detail = "Item not found"


class RestaurantNotFound(NotFoundError):
    default_detail = "Restaurant not found"


class CartNotFound(NotFoundError):
    default_detail = "Cart not found"


class CartItemNotFound(NotFoundError):
    default_detail = "Item not found in cart"


class AddressNotFound(NotFoundError):
    default_detail = "Delivery address not found"


class OrderNotFound(NotFoundError):
    default_detail = "Order not found"


# --- 400: состояние / бизнес-правила -----------------------------------------

class StateError(OrderingError):
    status_code = 400
    default_detail = "Request cannot be applied in the current state"


class ItemUnavailable(StateError):
    default_detail = "Item is out of stock"


class RestaurantClosed(StateError):
    default_detail = "Restaurant is not accepting orders"


class RestaurantMismatch(StateError):
    default_detail = "Cannot add items from different restaurants to the same cart"


class ItemRestaurantMismatch(StateError):
    default_detail = "Item does not belong to this restaurant"


class InvalidQuantity(StateError):
    default_detail = "Quantity must be at least 1"


class CartExpired(StateError):
    default_detail = "Cart has expired"


class CartEmpty(StateError):
    default_detail = "Cart is empty"


class MinimumOrderNotMet(StateError):
    default_detail = "Minimum order amount not met"


class IllegalTransition(StateError):
    default_detail = "Illegal order status transition"


# --- прочее ------------------------------------------------------------------

class AccessDenied(OrderingError):
    status_code = 403
    default_detail = "Access denied"


class ConcurrentModification(OrderingError):
    status_code = 409
    default_detail = "The resource was modified concurrently, retry the request"
