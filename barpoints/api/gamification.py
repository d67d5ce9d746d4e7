from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barpoints.core.config import settings as env_settings
from barpoints.core.context import RequestContext, get_context
from barpoints.core.database import get_db
from barpoints.models.ledger import LedgerType
from barpoints.schemas.gamification import (
    AchievementsOut,
    LeaderboardOut,
    LedgerEntryOut,
    LotteryOut,
    Period,
    PrizeOut,
    StatsOut,
)
from barpoints.services.achievements import query_achievements, user_stats
from barpoints.services.catalog import list_prizes
from barpoints.services.leaderboard import lottery_snapshot, query_leaderboard
from barpoints.services.ledger import list_entries

router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.get("/prizes", response_model=list[PrizeOut])
def read_prizes(
    category: Optional[str] = Query(None),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> list[PrizeOut]:
    rows = list_prizes(db, user_points=int(ctx.user.points or 0), category=category)
    return [PrizeOut.model_validate(r) for r in rows]


@router.get("/leaderboard", response_model=LeaderboardOut)
def read_leaderboard(
    period: Period = Query("all"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> LeaderboardOut:
    data = query_leaderboard(
        db,
        period=period,
        limit=limit or int(env_settings.LEADERBOARD_DEFAULT_LIMIT),
        viewer_id=ctx.user_id,
    )
    return LeaderboardOut.model_validate(data)


@router.get("/achievements", response_model=AchievementsOut)
def read_achievements(ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> AchievementsOut:
    return AchievementsOut.model_validate(query_achievements(db, ctx.user_id))


@router.get("/stats", response_model=StatsOut)
def read_stats(ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> StatsOut:
    return StatsOut.model_validate(user_stats(db, ctx.user_id))


@router.get("/lottery", response_model=LotteryOut)
def read_lottery(ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> LotteryOut:
    return LotteryOut.model_validate(lottery_snapshot(db, viewer_id=ctx.user_id))


@router.get("/ledger", response_model=list[LedgerEntryOut])
def read_ledger(
    type: Optional[LedgerType] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> list[LedgerEntryOut]:
    rows = list_entries(db, ctx.user_id, entry_type=type.value if type else None, limit=limit, offset=offset)
    return [LedgerEntryOut.model_validate(r) for r in rows]
