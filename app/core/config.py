from functools import lru_cache
from typing import Literal

from fastapi import Depends
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./todos.db"
    db_echo: bool = False
    # None keeps the engine default (SQLite already serializes transactions)
    list_isolation_level: str | None = "REPEATABLE READ"

    cache_backend: Literal["redis", "memory"] = "redis"
    redis_dsn: str = "redis://localhost:6379/0"
    redis_pool_size: int = 5
    cache_namespace: str = "appcache:"
    cache_timeout_seconds: float = 0.5
    memory_cache_maxsize: int = 2048

    store_timeout_seconds: float = 5.0
    # staleness backstop for missed invalidations; Redis rejects EX 0
    list_cache_ttl_seconds: int = Field(default=300, ge=1)
    single_flight: bool = True

    default_page_size: int = 10
    max_page_size: int = 100

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()


SettingsDep = Annotated[Settings, Depends(get_settings)]
