# barpoints/core/context.py
"""
Контекст запроса: кто вызывает и с какой ролью.

Аутентификацию делает шлюз перед API - он кладёт id пользователя в
заголовок X-User-Id, AuthGuardMiddleware переносит его в request.state.user.
Здесь пользователь подгружается из БД, роль нормализуется в Role.
Никакого глобального состояния: контекст живёт ровно один запрос.
"""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from barpoints.core.database import get_db
from barpoints.core.errors import PermissionDenied
from barpoints.models.user import Role, User, normalize_role


@dataclass
class RequestContext:
    user: User
    role: Role

    @property
    def user_id(self) -> int:
        return int(self.user.id)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_context(request: Request, db: Session = Depends(get_db)) -> RequestContext:
    u = getattr(request.state, "user", None) or {}
    uid = u.get("id")
    if not uid:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.get(User, int(uid))
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")

    return RequestContext(user=user, role=normalize_role(user.role))


def require_admin(ctx: RequestContext = Depends(get_context)) -> RequestContext:
    if not ctx.is_admin:
        raise PermissionDenied("Доступ запрещён. Требуется роль: admin")
    return ctx
