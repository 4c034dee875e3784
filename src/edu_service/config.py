from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_ENV: Literal["development", "test", "production"] = "development"
    APP_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "info"

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24

    DEMO_PASSWORD: str = "password123"

    CORS_ORIGINS: list[str] = ["*"]

    WS_URL: str = "ws://localhost:3001/ws"
    WS_RECONNECT_INTERVAL_SECONDS: float = 5.0
    WS_MAX_RECONNECT_ATTEMPTS: int = 5
    WS_HEARTBEAT_SECONDS: float = 30.0

    DEFAULT_PAGE_SIZE: int = 10

    SEED_DEMO_DATA: bool = False

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
