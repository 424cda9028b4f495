"""
Configuration settings for DB Explorer.

Uses Pydantic Settings to load environment variables for the database
connection, the connection pool, pagination defaults, logging and the HTTP
server bind address.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("db_explorer", alias="DB_NAME")
    db_schema: str = Field("public", alias="DB_SCHEMA")

    # Connection pool
    pool_min_size: int = Field(1, alias="POOL_MIN_SIZE")
    pool_max_size: int = Field(10, alias="POOL_MAX_SIZE")
    pool_timeout: float = Field(30.0, alias="POOL_TIMEOUT")

    # Pagination defaults for malformed offset/limit parameters
    default_offset: int = Field(0, alias="DEFAULT_OFFSET")
    default_limit: int = Field(5, alias="DEFAULT_LIMIT")

    # Emit columns of unsupported SQL types on read instead of omitting them
    passthrough_unrepresented: bool = Field(False, alias="PASSTHROUGH_UNREPRESENTED")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # HTTP server
    api_host: str = Field("127.0.0.1", alias="API_HOST")
    api_port: int = Field(8082, alias="API_PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
