from pydantic import BaseModel, Field
from typing import Optional

from meals_on_wheels.models.user import AddressLabelEnum


class AddressRead(BaseModel):
    id: int
    label: AddressLabelEnum
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    is_default: bool

    class Config:
        from_attributes = True


class AddressCreate(BaseModel):
    label: AddressLabelEnum = AddressLabelEnum.home
    name: str = Field(..., min_length=2, max_length=50)
    phone: str = Field(..., pattern=r"^\+?[0-9]{10,15}$")
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., pattern=r"^[0-9]{6}$")
    is_default: bool = False


class AddressUpdate(BaseModel):
    label: Optional[AddressLabelEnum] = None
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = Field(None, pattern=r"^\+?[0-9]{10,15}$")
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    pincode: Optional[str] = Field(None, pattern=r"^[0-9]{6}$")
    is_default: Optional[bool] = None

    class Config:
        extra = "forbid"
