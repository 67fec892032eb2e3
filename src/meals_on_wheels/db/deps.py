from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meals_on_wheels.db.session import get_async_session
from meals_on_wheels.models import RoleEnum, User

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Пользователь по bearer-токену из заголовка Authorization.
    Выдача токенов вне этого сервиса, здесь только поиск по users.api_token.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Access token required")

    result = await db.execute(select(User).where(User.api_token == credentials.credentials))
    user = result.scalars().first()
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is deactivated")
    return user


def require_role(role: RoleEnum):
    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role != role:
            raise HTTPException(status_code=403, detail="Access denied - insufficient permissions")
        return user

    return dependency


require_customer = require_role(RoleEnum.customer)
require_restaurant_owner = require_role(RoleEnum.restaurant_owner)
