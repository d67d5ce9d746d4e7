from barpoints.schemas.user import UserOut
from barpoints.schemas.sale import SaleCreate, SaleOut, QuoteOut
from barpoints.schemas.cart import CartOut, CheckoutIn
from barpoints.schemas.order import OrderOut, OrderListOut
from barpoints.schemas.payment import BalanceOut, WithdrawIn, WithdrawalOut
from barpoints.schemas.gamification import LeaderboardOut, AchievementsOut, StatsOut, LotteryOut
from barpoints.schemas.settings_schema import SettingsOut, SettingsUpdate
__all__ = [
    "UserOut",
    "SaleCreate",
    "SaleOut",
    "QuoteOut",
    "CartOut",
    "CheckoutIn",
    "OrderOut",
    "OrderListOut",
    "BalanceOut",
    "WithdrawIn",
    "WithdrawalOut",
    "LeaderboardOut",
    "AchievementsOut",
    "StatsOut",
    "LotteryOut",
    "SettingsOut",
    "SettingsUpdate",
]
