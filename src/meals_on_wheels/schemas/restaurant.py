from pydantic import BaseModel, Field, condecimal
from typing import Optional
from datetime import datetime
from decimal import Decimal

PHONE_PATTERN = r"^\+?[0-9]{10,15}$"


class RestaurantRead(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    phone: Optional[str] = None
    delivery_fee: Decimal
    minimum_order: Decimal
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RestaurantUpsert(BaseModel):
    """Профиль ресторана: создаётся при первом запросе, дальше перезаписывается."""

    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    delivery_fee: condecimal(ge=0, max_digits=10, decimal_places=2) = Decimal("0")
    minimum_order: condecimal(ge=0, max_digits=10, decimal_places=2) = Decimal("0")


class RestaurantSettingsUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    delivery_fee: Optional[condecimal(ge=0, max_digits=10, decimal_places=2)] = None
    minimum_order: Optional[condecimal(ge=0, max_digits=10, decimal_places=2)] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"
