from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):

    # Unset means "dynamodb" inside Lambda and "memory" everywhere else
    STORAGE_BACKEND: Literal["memory", "dynamodb"] | None = None
    AWS_LAMBDA_FUNCTION_NAME: str | None = None

    AWS_REGION: str = "us-east-1"
    AWS_PROFILE: str | None = None
    DYNAMODB_TABLE_NAME: str = "charity-ledger"

    CHARITIES_COLLECTION: str = "charities"
    CHARITY_NAMES_COLLECTION: str = "charity-names"
    DONATIONS_COLLECTION: str = "donations"

    SERVICE_NAME: str = "charity-ledger"
    LOG_LEVEL: str = "INFO"
    API_ROOT_PATH: str = ""
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @model_validator(mode="after")
    def default_storage_backend(self) -> "Settings":
        if self.STORAGE_BACKEND is None:
            self.STORAGE_BACKEND = "dynamodb" if self.AWS_LAMBDA_FUNCTION_NAME else "memory"
        return self

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
