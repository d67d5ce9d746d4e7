from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # SQLite по умолчанию. В проде - PostgreSQL (нужен для SELECT FOR UPDATE).
    DATABASE_URL: str = "sqlite:///./barpoints.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # --- Вывод средств (СБП) ---
    WITHDRAW_MIN_AMOUNT: Decimal = Decimal("100")
    WITHDRAW_MAX_AMOUNT: Decimal = Decimal("50000")
    WITHDRAW_COMMISSION_RATE: Decimal = Decimal("0.02")

    # --- Заказы призов ---
    ORDER_DELIVERY_DAYS: int = 7

    # 1 балл = 1 рубль заработка
    EARNINGS_PER_POINT: Decimal = Decimal("1")

    # --- Лотерея ---
    LOTTERY_TICKET_POINTS: int = 100
    LOTTERY_MIN_POINTS: int = 100

    LEADERBOARD_DEFAULT_LIMIT: int = 50

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
