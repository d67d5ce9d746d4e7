# barpoints/services/leaderboard.py
"""
Рейтинг барменов и месячная лотерея.

Всё считается на лету из леджера, ничего не сохраняется.
Баллы за период = earned + bonus - penalty с начала периода.
Ничья - раньше зарегистрированный выше (потом по id), порядок всегда детерминирован.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta

from sqlalchemy import and_, case, desc, func, select
from sqlalchemy.orm import Session, selectinload

from barpoints.core.errors import InvalidInput
from barpoints.models.ledger import LedgerEntry, LedgerType
from barpoints.models.user import BARTENDER_ROLES, User
from barpoints.services.program import get_program_settings
from barpoints.services.users import user_view

PERIODS = ("all", "monthly", "weekly")


def _now() -> datetime:
    return datetime.utcnow()


def period_start(period: str, now: datetime | None = None) -> datetime | None:
    now = now or _now()
    period = (period or "all").strip().lower()
    if period == "all":
        return None
    if period == "monthly":
        return datetime(now.year, now.month, 1)
    if period == "weekly":
        # неделя с воскресенья
        days_since_sunday = (now.weekday() + 1) % 7
        start = now - timedelta(days=days_since_sunday)
        return datetime(start.year, start.month, start.day)
    raise InvalidInput(f"Неизвестный период: {period}. Допустимо: all, monthly, weekly")


def _period_points_expr():
    return func.coalesce(
        func.sum(
            case(
                (LedgerEntry.type.in_((LedgerType.EARNED.value, LedgerType.BONUS.value)), LedgerEntry.amount),
                (LedgerEntry.type == LedgerType.PENALTY.value, -LedgerEntry.amount),
                else_=0,
            )
        ),
        0,
    )


def period_points(db: Session, user_id: int, since: datetime | None = None) -> int:
    """Баллы пользователя за период по тем же правилам, что и в рейтинге."""
    q = select(_period_points_expr()).where(LedgerEntry.user_id == user_id)
    if since is not None:
        q = q.where(LedgerEntry.created_at >= since)
    return int(db.scalar(q) or 0)


def build_ranking(db: Session, period: str = "all", now: datetime | None = None) -> list[dict]:
    since = period_start(period, now)

    join_on = LedgerEntry.user_id == User.id
    if since is not None:
        join_on = and_(join_on, LedgerEntry.created_at >= since)

    points_col = _period_points_expr().label("period_points")
    q = (
        select(User, points_col)
        .outerjoin(LedgerEntry, join_on)
        .where(User.role.in_(BARTENDER_ROLES), User.is_active.is_(True))
        .group_by(User.id)
        .order_by(desc(points_col), User.created_at.asc(), User.id.asc())
        .options(selectinload(User.city), selectinload(User.bar))
    )

    out: list[dict] = []
    for rank, (user, pts) in enumerate(db.execute(q).all(), start=1):
        view = user_view(user)
        out.append(
            {
                "rank": rank,
                "user_id": view["id"],
                "name": view["name"],
                "city": view["city"],
                "bar": view["bar"],
                "points": view["points"],
                "total_earnings": view["total_earnings"],
                "period_points": int(pts or 0),
            }
        )
    return out


def query_leaderboard(
    db: Session,
    period: str = "all",
    limit: int = 50,
    viewer_id: int | None = None,
    now: datetime | None = None,
) -> dict:
    ranking = build_ranking(db, period=period, now=now)

    user_rank = None
    if viewer_id is not None:
        for row in ranking:
            if row["user_id"] == viewer_id:
                user_rank = row["rank"]
                break

    return {
        "leaderboard": ranking[: max(0, int(limit))],
        "user_rank": user_rank,
        "period": (period or "all").strip().lower(),
        "total": len(ranking),
    }


def lottery_snapshot(db: Session, viewer_id: int | None = None, now: datetime | None = None) -> dict:
    """Месячная лотерея: 1 билет за каждые N баллов за месяц, участие от min баллов."""
    now = now or _now()
    program = get_program_settings(db)
    ticket_points = max(1, int(program.lottery_ticket_points))
    min_points = int(program.lottery_min_points)

    participants = []
    for row in build_ranking(db, period="monthly", now=now):
        if row["period_points"] < min_points:
            continue
        participants.append({**row, "tickets": row["period_points"] // ticket_points})

    total_tickets = sum(p["tickets"] for p in participants)
    user_tickets = next((p["tickets"] for p in participants if p["user_id"] == viewer_id), 0)
    chance = round(user_tickets / total_tickets * 100, 2) if total_tickets else 0.0

    last_day = calendar.monthrange(now.year, now.month)[1]
    return {
        "is_active": True,
        "end_date": datetime(now.year, now.month, last_day, 23, 59, 59),
        "participants": len(participants),
        "total_tickets": total_tickets,
        "user_tickets": user_tickets,
        "user_chance": chance,
        "min_points": min_points,
        "ticket_points": ticket_points,
        "top_participants": participants[:10],
    }
