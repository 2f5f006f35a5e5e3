from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "ProductsAPI"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"
    LOG_LEVEL: str | None = None   # overrides DEBUG-derived level

    # Mongo
    MONGO_URI: str
    MONGO_DB: str
    PRODUCTS_COLLECTION: str = "products"

    # Auth services (API keys for writes, sessions for reads)
    APIKEY_SERVICE_URL: str
    SESSION_SERVICE_URL: str
    auth_timeout_s: float = 5.0     # seconds, per call to either service
    write_permission: str = "write:products"

    # API
    api_prefix: str = "/api/v1"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
