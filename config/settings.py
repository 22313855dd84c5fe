from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.pl_common.cents import DEFAULT_TOLERANCE_CENTS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_NAME: str = "Poker Ledger Settlement"
    DEBUG: bool = False

    # Tolerances, in cents. ±1 absorbs a single upstream half-cent rounding.
    SETTLEMENT_TOLERANCE_CENTS: int = Field(default=DEFAULT_TOLERANCE_CENTS, ge=0)
    BANK_TOLERANCE_CENTS: int = Field(default=0, ge=0)

    # Result cache (in-process, TTL-bounded)
    CACHE_TTL_SECONDS: float = Field(default=300.0, gt=0)
    CACHE_MAX_ENTRIES: int = Field(default=256, ge=1)

    # Advisory latency budgets: logged when exceeded, never enforced
    EARLY_CASHOUT_BUDGET_MS: float = 1000.0
    OPTIMIZE_BUDGET_MS: float = 2000.0


settings = Settings()
