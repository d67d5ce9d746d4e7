from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from barpoints.schemas.user import RefOut


Period = Literal["all", "monthly", "weekly"]


class PrizeOut(BaseModel):
    id: int
    name: str
    description: str
    cost: int
    category: str
    quantity: int
    image_url: Optional[str] = None
    is_available: bool
    can_afford: bool = False


class LeaderboardRowOut(BaseModel):
    rank: int
    user_id: int
    name: str
    city: Optional[RefOut] = None
    bar: Optional[RefOut] = None
    points: int
    total_earnings: Decimal
    period_points: int


class LeaderboardOut(BaseModel):
    leaderboard: List[LeaderboardRowOut]
    user_rank: Optional[int] = None
    period: Period
    total: int


class AchievementOut(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    unlocked: bool
    progress: int
    target: int
    percentage: int
    unlocked_at: Optional[datetime] = None


class AchievementSummaryOut(BaseModel):
    unlocked: int
    total: int
    percentage: int


class AchievementStatsOut(BaseModel):
    total_sales: int
    total_points: int
    total_redemptions: int


class AchievementsOut(BaseModel):
    achievements: List[AchievementOut]
    summary: AchievementSummaryOut
    stats: AchievementStatsOut


class MilestoneOut(BaseModel):
    target: int
    progress: int
    remaining: int
    percentage: int


class UserLevelOut(BaseModel):
    points: int
    total_earnings: Decimal
    rank: Optional[int] = None
    level: int
    points_for_next_level: int
    progress_to_next_level: int


class MonthlyStatsOut(BaseModel):
    points: int
    sales: int


class AllTimeStatsOut(BaseModel):
    sales: int
    redemptions: int
    total_points_earned: int
    total_points_spent: int


class MilestonesOut(BaseModel):
    next_sales_milestone: Optional[MilestoneOut] = None
    next_points_milestone: Optional[MilestoneOut] = None


class StatsOut(BaseModel):
    user: UserLevelOut
    monthly: MonthlyStatsOut
    all_time: AllTimeStatsOut
    milestones: MilestonesOut


class LotteryParticipantOut(BaseModel):
    rank: int
    user_id: int
    name: str
    period_points: int
    tickets: int


class LotteryOut(BaseModel):
    is_active: bool
    end_date: datetime
    participants: int
    total_tickets: int
    user_tickets: int
    user_chance: float
    min_points: int
    ticket_points: int
    top_participants: List[LotteryParticipantOut]


class LedgerEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    amount: int
    signed_amount: int
    description: str
    sale_id: Optional[int] = None
    order_id: Optional[int] = None
    created_at: datetime
