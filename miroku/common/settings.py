# miroku/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False


class DBConfig(BaseModel):
    driver: str = "postgresql+psycopg"
    host: str = "localhost"
    port: int = 5432
    name: str = "miroku"
    user: str = "miroku"
    password: str = "miroku"
    schema_name: str = "miroku"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 1800

    @computed_field  # type: ignore[misc]
    @property
    def composed_url(self) -> str:
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class CatalogConfig(BaseModel):
    """Third-party movie catalog (TMDB-compatible) access."""
    base_url: str = "https://api.themoviedb.org/3"
    api_key: str = ""
    language: str = "ja-JP"
    timeout_sec: float = 10.0
    person_lookup_chunk: int = Field(10, ge=1, le=50)
    writer_limit: int = Field(5, ge=1)
    cast_limit: int = Field(5, ge=1)
    # First alias matching this pattern becomes the localized display name
    localized_name_pattern: str = r"[\u3040-\u30ff\u4e00-\u9fff]"

    @computed_field  # type: ignore[misc]
    @property
    def uses_bearer_token(self) -> bool:
        # v4 read-access tokens are JWTs; v3 keys are plain hex
        return self.api_key.startswith("eyJ")


class RefreshConfig(BaseModel):
    bulk_delay_sec: float = Field(0.1, ge=0.0, description="Pause between bulk refresh items")


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "miroku"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"
    tz: str = "UTC"

    # Optional single URL (if set, it takes precedence over db.*)
    database_url_override: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL"),
    )

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    db: DBConfig = DBConfig()
    catalog: CatalogConfig = CatalogConfig()
    refresh: RefreshConfig = RefreshConfig()

    # -------- Alembic / migrations --------
    alembic_script_location: str = "miroku/database/alembic"
    alembic_version_table_schema: str = "public"

    # -------- Testcontainers / CI toggles --------
    use_testcontainers: bool = False
    test_db_image: str = "postgres:15-alpine"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("use_testcontainers", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    # ===== Convenience: DB URL & schema =====
    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        return self.database_url_override or self.db.composed_url

    @computed_field  # type: ignore[misc]
    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @computed_field  # type: ignore[misc]
    @property
    def db_schema(self) -> Optional[str]:
        """Application schema, or None when the backend has no schemas (SQLite) or uses public."""
        if self.is_sqlite:
            return None
        name = (self.db.schema_name or "").strip()
        if not name or name.lower() == "public":
            return None
        return name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from miroku.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
