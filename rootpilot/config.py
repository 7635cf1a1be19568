from typing import Optional

from pydantic import Field, constr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="SQLAlchemy async database URL (in-memory SQLite by default)",
    )
    DATABASE_ECHO: bool = Field(default=False)

    # JWT configuration
    SECRET_KEY: constr(strip_whitespace=True, min_length=1) = Field(
        ..., description="JWT signing secret key (required)"
    )
    ALGORITHM: constr(strip_whitespace=True, min_length=1) = Field(default="HS256")
    # 7 days
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=10080, ge=1)
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # Report "Access denied" on foreign resources as "not found" instead
    HIDE_FOREIGN_RESOURCES: bool = Field(default=False)

    # Analysis engine
    ANALYSIS_ENGINE: str = Field(default="mock")
    ANALYSIS_SEED: Optional[int] = Field(
        default=None, description="Seed for the mock engine; random when unset"
    )

    # Rate limiting configuration
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_REQUESTS: int = Field(
        default=20,
        description="Maximum number of auth requests allowed per timescale",
    )
    RATE_LIMIT_TIMESCALE_MINUTES: int = Field(
        default=1,
        description="Time period in minutes for rate limiting",
    )
    RATE_LIMIT_STORAGE_URI: str = Field(default="memory://")

    LOG_LEVEL: str = Field(default="INFO")

    # CORS configuration
    CORS_ALLOWED_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:5000",
        description="Comma separated list of origins allowed by CORS",
    )

    @field_validator("CORS_ALLOWED_ORIGINS")
    @classmethod
    def validate_cors_origins(cls, value: str) -> str:
        if not isinstance(value, str):
            value = str(value)
        origins = [origin.strip() for origin in value.split(",") if origin and origin.strip()]
        if any(origin == "*" or origin.endswith("/*") for origin in origins):
            raise ValueError("CORS_ALLOWED_ORIGINS must not contain '*'. List the allowed origins explicitly.")
        return ",".join(origins)

    @field_validator("ANALYSIS_ENGINE")
    @classmethod
    def validate_analysis_engine(cls, value: str) -> str:
        value = value.strip().lower()
        if value != "mock":
            raise ValueError(f"Unknown analysis engine: {value!r}")
        return value

    def get_cors_allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
