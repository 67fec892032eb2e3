from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from meals_on_wheels.models.user import RoleEnum


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: RoleEnum
    created_at: datetime

    class Config:
        from_attributes = True
