from functools import lru_cache
from typing import Annotated, Any, List, Optional
import json
import os

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Grocery Price Aggregator"
    DEBUG: bool = False
    PORT: int = 3000

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True

    # Vendor fan-out settings, in configured order
    ENABLED_VENDORS: Annotated[List[str], NoDecode] = ["kroger", "walmart"]
    VENDOR_TIMEOUT_SECONDS: float = 10.0
    HTTP_TIMEOUT_SECONDS: float = 10.0
    TOKEN_SAFETY_MARGIN_SECONDS: int = 60

    # Kroger catalog
    KROGER_CLIENT_ID: Optional[str] = None
    KROGER_CLIENT_SECRET: Optional[str] = None
    KROGER_SCOPE: str = "product.compact"
    KROGER_BASE_URL: str = "https://api.kroger.com/v1"
    KROGER_LOCATION_ID: Optional[str] = None
    KROGER_RESOLVE_LOCATION_FROM_ZIP: bool = True
    KROGER_TOKEN_AUTH: str = "body"
    KROGER_RESULT_LIMIT: int = 10

    # Walmart price/availability
    WALMART_CONSUMER_ID: Optional[str] = None
    WALMART_CLIENT_SECRET: Optional[str] = None
    WALMART_BASE_URL: str = "https://developer.api.walmart.com/api-proxy/service"
    WALMART_OFFER_ID_MAP: Optional[str] = None
    WALMART_RESULT_LIMIT: int = 10

    @field_validator("BACKEND_CORS_ORIGINS", "ENABLED_VENDORS", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> List[str]:
        """Parse a list from a comma separated string or a list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    @field_validator("KROGER_TOKEN_AUTH")
    @classmethod
    def check_token_auth(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("body", "basic"):
            raise ValueError("KROGER_TOKEN_AUTH must be 'body' or 'basic'")
        return v


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching for efficiency.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
