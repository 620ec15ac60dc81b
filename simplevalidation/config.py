from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    # Instructions
    TAG_KEY: str = "validate"  # metadata key holding a field's instruction
    FREEZE_REGISTRY: bool = False  # freeze the default checker registry once built-ins are loaded

    # Email checker
    MX_LOOKUP_TIMEOUT: float = 5.0  # seconds, upper bound on one MX resolution

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for structured JSON, False for colored console output

    model_config = SettingsConfigDict(env_prefix="SV_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
