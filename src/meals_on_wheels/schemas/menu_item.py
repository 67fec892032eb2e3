from pydantic import BaseModel, Field, condecimal, conint
from typing import Optional
from datetime import datetime
from decimal import Decimal


class MenuItemRead(BaseModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    category: str
    price: Decimal
    is_out_of_stock: bool
    is_vegetarian: bool
    preparation_time: int
    created_at: datetime

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=64)
    price: condecimal(ge=0, max_digits=10, decimal_places=2)
    is_out_of_stock: bool = False
    is_vegetarian: bool = False
    preparation_time: conint(ge=5, le=120) = 15


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=64)
    price: Optional[condecimal(ge=0, max_digits=10, decimal_places=2)] = None
    is_out_of_stock: Optional[bool] = None
    is_vegetarian: Optional[bool] = None
    preparation_time: Optional[conint(ge=5, le=120)] = None

    class Config:
        extra = "forbid"
