import json
import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=4000, ge=1, le=65535, description="Listen port")
    downloads_dir: str = Field(default="downloads", description="Reserved downloads directory, created at startup")


class ProviderConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    retries: int = Field(default=3, ge=0, description="yt-dlp internal retries for fragment/network errors")
    info_timeout: float = Field(default=30.0, gt=0, description="Metadata fetch timeout in seconds")
    js_runtime: Optional[str] = Field(default=None, description="JS runtime passed to yt-dlp (e.g. deno:/usr/local/bin/deno)")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="tubefetch", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class Config(BaseSettings):
    """Main configuration model"""

    model_config = SettingsConfigDict(env_prefix="TUBEFETCH_", env_nested_delimiter="__")

    server: ServerConfig = Field(default_factory=ServerConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from a JSON file; values in the file win over the environment"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {e}")
            logger.info("Using environment/default configuration")
            return cls()

        logger.info(f"Configuration loaded from {config_path}")
        return cls(**config_data)


def load_config(config_path: str = CONFIG_PATH) -> Config:
    """Load configuration with priority: config file > env vars > defaults"""
    if os.path.exists(config_path):
        return Config.load_from_file(config_path)

    logger.debug(f"Config file not found at {config_path}, using environment variables")
    return Config()


config = load_config()
