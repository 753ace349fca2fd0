from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging settings
    log_level: str = "WARNING"

    # Hardening switches; all off by default
    enforce_account_locks: bool = False
    reject_duplicate_transactions: bool = False
    enforce_dispute_ownership: bool = False

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
