from __future__ import annotations

from fastapi import APIRouter, Depends

from barpoints.core.context import RequestContext, get_context
from barpoints.schemas.user import UserOut
from barpoints.services.users import user_view

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
def read_me(ctx: RequestContext = Depends(get_context)) -> UserOut:
    return UserOut.model_validate(user_view(ctx.user))
