from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional, List

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class TMDBSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TMDB_", extra="ignore")
    api_key: Optional[SecretStr] = None            # v3 key, sent as ?api_key=
    read_access_token: Optional[SecretStr] = None  # v4 token, sent as Bearer header
    api_base_url: AnyHttpUrl = "https://api.themoviedb.org/3"
    image_base_url: str = "https://image.tmdb.org/t/p"
    timeout: float = 7.0
    max_retries: int = 5
    backoff_factor: float = 2.0

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None or self.read_access_token is not None


class MongoSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MONGO_", extra="ignore")
    uri: str = "mongodb://localhost:27017"
    db_name: str = "showsnap"
    server_selection_timeout_ms: int = 5000


class Settings(BaseSettings):

    # ---- Data roots (local storage backend and seed inputs) ----
    project_root: Path = Path(".").resolve()
    data_root: Path = Path("data")
    local_store_dir: Path = data_root / "store"

    # ---- app/runtime ----
    env: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    verify_ssl: bool = True
    storage_backend: Literal["mongo", "local"] = "mongo"

    # ---- reproducibility ----
    random_seed: Optional[int] = None  # None -> fresh seat maps on every seed run

    # ---- booking ----
    ticket_price: float = 200.0

    # ---- API server configuration ----
    api_host: str = "127.0.0.1"  # localhost for dev, 0.0.0.0 for docker/prod
    api_port: int = 5000
    api_reload: bool = True  # Auto-reload on code changes (dev only)
    api_workers: int = 1  # Number of uvicorn workers (increase for prod)
    cors_origins: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_prefix="APP_",      # APP_ENV, APP_LOG_LEVEL, etc.
        env_nested_delimiter='__',
        extra = "ignore"
    )

    # ---- integrations ----
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    tmdb: TMDBSettings = Field(default_factory=TMDBSettings)


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor to avoid reparsing .env on every import."""
    return Settings()
