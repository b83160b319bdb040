import logging
from pydantic_settings import BaseSettings
from pydantic import model_validator, ConfigDict
from functools import lru_cache

logger = logging.getLogger(__name__)

PLACEHOLDER_USER_ID = "00000000-0000-0000-0000-000000000001"


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment: "development" or "production"
    environment: str = "development"
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost/ppc_manager"
    database_ssl: bool = False
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_connect_timeout: int = 30
    db_echo: bool = False

    @model_validator(mode="before")
    @classmethod
    def _fix_database_url_for_asyncpg(cls, values: dict) -> dict:
        """Hosted Postgres gives postgresql:// — we need postgresql+asyncpg:// for asyncpg."""
        if not isinstance(values, dict):
            return values
        url = values.get("database_url") or ""
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            values["database_url"] = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return values

    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Stand-in identity until real authentication supplies the caller
    default_user_id: str = PLACEHOLDER_USER_ID
    default_user_email: str = "demo@ppc-manager.local"

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":
        """Enforce that the stand-in identity is set explicitly in production."""
        if self.is_production:
            if self.default_user_id == PLACEHOLDER_USER_ID:
                raise ValueError(
                    "DEFAULT_USER_ID must be set explicitly in production. "
                    "Generate one with: python -c \"import uuid; print(uuid.uuid4())\""
                )
            if not self.database_url or "localhost" in self.database_url:
                logger.warning("DATABASE_URL appears to point at localhost in production.")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins or ["http://localhost:5173", "http://localhost:3000"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
