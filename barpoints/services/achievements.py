from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from barpoints.models.achievement import AchievementUnlock
from barpoints.models.ledger import LedgerType
from barpoints.models.order import Order, OrderStatus
from barpoints.models.sale import Sale
from barpoints.services.leaderboard import build_ranking, period_points, period_start
from barpoints.services.ledger import sum_by_type
from barpoints.services.users import get_user

LEVEL_SIZE = 1000
SALES_MILESTONES = (10, 25, 50, 100, 250, 500)
POINTS_MILESTONES = (500, 1000, 2500, 5000, 10000, 25000)


@dataclass(frozen=True)
class Achievement:
    code: str
    name: str
    description: str
    icon: str
    metric: str  # ключ из stats
    target: int


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement("first_sale", "Первая продажа", "Добавьте свою первую продажу", "🎯", "total_sales", 1),
    Achievement("sales_10", "Активный продавец", "Совершите 10 продаж", "🔥", "total_sales", 10),
    Achievement("sales_50", "Профессионал", "Совершите 50 продаж", "⭐", "total_sales", 50),
    Achievement("sales_100", "Мастер продаж", "Совершите 100 продаж", "👑", "total_sales", 100),
    Achievement("points_1000", "Коллекционер баллов", "Накопите 1000 баллов", "💎", "total_points", 1000),
    Achievement("points_5000", "Магнат баллов", "Накопите 5000 баллов", "💰", "total_points", 5000),
    Achievement("first_redemption", "Первый приз", "Обменяйте баллы на первый приз", "🎁", "total_redemptions", 1),
)


def _now() -> datetime:
    return datetime.utcnow()


def _count_sales(db: Session, user_id: int, since: datetime | None = None) -> int:
    q = select(func.count(Sale.id)).where(Sale.user_id == user_id)
    if since is not None:
        q = q.where(Sale.created_at >= since)
    return int(db.scalar(q) or 0)


def _count_redemptions(db: Session, user_id: int) -> int:
    return int(
        db.scalar(
            select(func.count(Order.id)).where(
                Order.user_id == user_id,
                Order.status != OrderStatus.CANCELLED.value,
            )
        )
        or 0
    )


def _net_spent(db: Session, user_id: int) -> int:
    # потрачено на призы за вычетом возвратов по отменённым заказам
    spent = sum_by_type(db, user_id, LedgerType.SPENT) - sum_by_type(db, user_id, LedgerType.REFUND)
    return max(0, spent)


def achievement_stats(db: Session, user_id: int) -> dict:
    user = get_user(db, user_id)
    return {
        "total_sales": _count_sales(db, user_id),
        # всё накопленное: текущий баланс + потраченное на призы
        "total_points": int(user.points or 0) + _net_spent(db, user_id),
        "total_redemptions": _count_redemptions(db, user_id),
    }


def query_achievements(db: Session, user_id: int, now: datetime | None = None) -> dict:
    """
    Прогресс = min(значение, цель), открыто = прогресс >= цели.
    Момент первого открытия пишется в кэш achievement_unlocks.
    """
    now = now or _now()
    stats = achievement_stats(db, user_id)

    cached = {
        row.code: row.unlocked_at
        for row in db.scalars(select(AchievementUnlock).where(AchievementUnlock.user_id == user_id)).all()
    }

    items = []
    fresh = False
    for a in ACHIEVEMENTS:
        value = int(stats.get(a.metric, 0))
        progress = min(value, a.target)
        unlocked = progress >= a.target

        unlocked_at = cached.get(a.code)
        if unlocked and unlocked_at is None:
            db.add(AchievementUnlock(user_id=user_id, code=a.code, unlocked_at=now))
            unlocked_at = now
            fresh = True

        items.append(
            {
                "id": a.code,
                "name": a.name,
                "description": a.description,
                "icon": a.icon,
                "unlocked": unlocked,
                "progress": progress,
                "target": a.target,
                "percentage": round(progress / a.target * 100) if a.target else 100,
                "unlocked_at": unlocked_at if unlocked else None,
            }
        )

    if fresh:
        db.commit()

    unlocked_count = sum(1 for i in items if i["unlocked"])
    total = len(items)
    return {
        "achievements": items,
        "summary": {
            "unlocked": unlocked_count,
            "total": total,
            "percentage": round(unlocked_count / total * 100) if total else 0,
        },
        "stats": stats,
    }


def next_milestone(current: int, milestones: tuple[int, ...]) -> dict | None:
    for m in milestones:
        if m > current:
            return {
                "target": m,
                "progress": current,
                "remaining": m - current,
                "percentage": round(current / m * 100),
            }
    return None


def user_stats(db: Session, user_id: int, now: datetime | None = None) -> dict:
    now = now or _now()
    user = get_user(db, user_id)
    points = int(user.points or 0)

    rank = None
    for row in build_ranking(db, period="all", now=now):
        if row["user_id"] == user_id:
            rank = row["rank"]
            break

    month_start = period_start("monthly", now)
    sales_total = _count_sales(db, user_id)

    level = points // LEVEL_SIZE + 1
    return {
        "user": {
            "points": points,
            "total_earnings": user.total_earnings,
            "rank": rank,
            "level": level,
            "points_for_next_level": level * LEVEL_SIZE - points,
            "progress_to_next_level": round((points % LEVEL_SIZE) / LEVEL_SIZE * 100),
        },
        "monthly": {
            "points": period_points(db, user_id, since=month_start),
            "sales": _count_sales(db, user_id, since=month_start),
        },
        "all_time": {
            "sales": sales_total,
            "redemptions": _count_redemptions(db, user_id),
            "total_points_earned": sum_by_type(db, user_id, LedgerType.EARNED),
            "total_points_spent": _net_spent(db, user_id),
        },
        "milestones": {
            "next_sales_milestone": next_milestone(sales_total, SALES_MILESTONES),
            "next_points_milestone": next_milestone(points, POINTS_MILESTONES),
        },
    }
