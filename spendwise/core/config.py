from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "SpendWise"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = None  # e.g. http://localhost:8000 for DynamoDB Local
    DYNAMO_USERS_TABLE: str = Field(default="spendwise-users")
    DYNAMO_EXPENSES_TABLE: str = Field(default="spendwise-expenses")
    DYNAMO_CREATE_TABLES: bool = Field(default=False)

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="change-me-in-production-5f1c0a9e7d4b4c2a8e6f3d1b9a7c5e3f")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30  # 30 days

    # Rate limiting (per client IP)
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX: int = 100
    LOGIN_RATE_LIMIT_MAX: int = 20

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @field_validator("ENVIRONMENT")
    @classmethod
    def check_environment(cls, v: str) -> str:
        allowed = ("development", "production", "test")
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of {', '.join(allowed)}")
        return v

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


settings = Settings()
