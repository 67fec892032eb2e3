from fastapi import APIRouter, Depends

from ..db.deps import get_current_user
from ..schemas.user import UserOut
from ..models.user import User

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me", response_model=UserOut)
async def read_me(user: User = Depends(get_current_user)):
    return user
