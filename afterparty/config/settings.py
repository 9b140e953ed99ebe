from functools import cached_property
from typing import FrozenSet, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram
    bot_token: str = Field(default="", alias="BOT_TOKEN")
    # Comma-separated Telegram user IDs allowed to delete events
    admin_user_ids: str = Field(default="", alias="ADMIN_USER_IDS")

    # Database: DATABASE_URL wins over the DB_* parts
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_name: str = Field(default="afterparty", alias="DB_NAME")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="", alias="DB_PASSWORD")
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, alias="DB_MAX_OVERFLOW")
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    # FSM storage; memory storage when disabled
    use_redis: bool = Field(default=True, alias="USE_REDIS")
    redis_url_override: Optional[str] = Field(default=None, alias="REDIS_URL")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    # Roster snapshot used for role resolution (JSON file)
    roster_file: Optional[str] = Field(default=None, alias="ROSTER_FILE")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def redis_url(self) -> str:
        if self.redis_url_override:
            return self.redis_url_override
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @cached_property
    def admin_ids(self) -> FrozenSet[int]:
        return frozenset(
            int(uid.strip()) for uid in self.admin_user_ids.split(",") if uid.strip()
        )

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_ids


# Global settings instance
settings = Settings()
