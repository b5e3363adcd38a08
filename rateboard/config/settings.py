# rateboard/config/settings.py

from functools import lru_cache
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CURRENCY_NAMES: Dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "TRY": "Turkish Lira",
    "JPY": "Japanese Yen",
    "SAR": "Saudi Riyal",
    "JOD": "Jordanian Dinar",
    "KWD": "Kuwaiti Dinar",
}


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "rateboard"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Currencies ---
    allowed_currency_codes: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CURRENCY_NAMES)
    )
    currency_names: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CURRENCY_NAMES)
    )
    seed_default_currencies: bool = True

    # --- Retention ---
    rate_history_limit: int = Field(10, ge=1)
    activity_retention_days: int = Field(90, ge=1)

    # --- Persistence ---
    # Unset database_url selects the in-process arena store.
    database_url: Optional[str] = None
    persist_timeout_seconds: float = Field(5.0, gt=0)
    broadcast_send_timeout_seconds: float = Field(1.0, gt=0)

    # --- Redis ---
    redis_url: Optional[str] = None
    rates_cache_ttl: int = Field(300, ge=1)

    # --- Messaging ---
    rabbitmq_url: Optional[str] = None
    rates_exchange: str = "currency_rates"

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("allowed_currency_codes")
    @classmethod
    def normalize_codes(cls, v: List[str]) -> List[str]:
        codes = [c.strip().upper() for c in v if c and c.strip()]
        if not codes:
            raise ValueError("allowed_currency_codes must not be empty")
        return codes

    @field_validator("currency_names")
    @classmethod
    def normalize_name_keys(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {k.strip().upper(): name for k, name in v.items()}


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()


# Singleton for direct import (e.g. in infrastructure clients)
settings = get_settings()
