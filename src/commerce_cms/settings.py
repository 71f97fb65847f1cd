"""
commerce_cms.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the API and the workers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for processes without an app (workers, Alembic).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CMS_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "commerce-cms"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "commerce-cms"
    jwt_audience: str = "commerce-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./commerce.db"

    # Cache + queues
    redis_url: str = "redis://localhost:6379/0"
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/1"
    cache_ttl_seconds: int = 300

    # Uploads
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_image_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/jpg", "image/png", "image/webp"]
    )
    max_product_images: int = 4

    # Image optimization targets
    post_image_width: int = 835
    post_image_height: int = 577
    product_image_width: int = 1080
    product_image_height: int = 1080
    image_quality: int = 100

    # Client IPs that still get through while maintenance mode is on.
    maintenance_whitelist: list[str] = Field(default_factory=lambda: ["127.0.0.1"])

    @property
    def images_dir(self) -> Path:
        return self.upload_dir / "images"

    @property
    def optimized_dir(self) -> Path:
        return self.upload_dir / "optimize"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars in long-lived worker processes.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The API stores its Settings instance on `app.state`; request dependencies read it
# from there (see `api.deps.settings_dep`) so tests can inject their own.
