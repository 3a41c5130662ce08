"""
Booth Client — Configuration (env prefix BOOTH_)
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="BOOTH_", extra="ignore")

    # ── Order service ─────────────────────────────────────────
    API_BASE_URL: str = "http://localhost:8000"
    HTTP_TIMEOUT_SECONDS: float = 5.0

    # ── Offline store ─────────────────────────────────────────
    OFFLINE_DB_PATH: str = "data/booth-offline.db"
    SYNCED_RETENTION_SECONDS: int = 3600
    # Replay failures after which a pending order is logged at ERROR
    SYNC_RETRY_ALERT_THRESHOLD: int = 5

    @property
    def offline_database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.OFFLINE_DB_PATH}"

    # ── Polling ───────────────────────────────────────────────
    ORDER_POLL_INTERVAL_SECONDS: float = 5.0
    QUEUE_POLL_INTERVAL_SECONDS: float = 10.0
    POLL_JITTER_SECONDS: float = 0.5
    CONNECTIVITY_PROBE_INTERVAL_SECONDS: float = 15.0

    # ── Ordering rules ────────────────────────────────────────
    KIOSK_MAX_QUANTITY: int = 10
    POS_MAX_QUANTITY: int = 30
    TIMEZONE: str = "Asia/Bangkok"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
