# taskmanager/core/config.py
from __future__ import annotations

from pathlib import Path
from typing import List, Literal

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]

# Populate os.environ too; db/session.py and alembic read DATABASE_* directly.
load_dotenv(ROOT_DIR / ".env")

DEV_JWT_SECRET = "taskmanager-dev-secret-change-me"


class Settings(BaseSettings):
    # App
    app_env: Literal["dev", "test", "prod"] = Field("dev", alias="ENV")
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_allow_origins: str = Field(
        "http://localhost:3000,http://localhost:5173", alias="CORS_ALLOW_ORIGINS"
    )
    auto_create_tables: bool = Field(False, alias="AUTO_CREATE_TABLES")

    # Auth
    jwt_secret_key: str = Field(DEV_JWT_SECRET, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60 * 24 * 7, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    bcrypt_rounds: int = Field(12, ge=4, le=31, alias="BCRYPT_ROUNDS")

    # Task listing
    task_list_default_limit: int = Field(50, alias="TASK_LIST_DEFAULT_LIMIT")
    task_list_max_limit: int = Field(100, alias="TASK_LIST_MAX_LIMIT")

    # Client
    api_url: str = Field("http://localhost:8000", alias="TASKMANAGER_API_URL")

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _refuse_dev_secret_in_prod(self) -> "Settings":
        if self.app_env == "prod" and self.jwt_secret_key == DEV_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set when ENV=prod")
        return self

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


settings = Settings()
