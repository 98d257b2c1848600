"""
Shared configuration management for the JSSDK Access Layer.
"""

from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="JSSDK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Issuer identity
    app_id: str = Field(default="")
    secret: str = Field(default="")
    corp: bool = Field(default=False)
    nonce_str_length: int = Field(default=16)

    # Persistence
    persistence_type: str = Field(default="memory")
    redis_host: str = Field(default="127.0.0.1")
    redis_port: int = Field(default=6379)
    redis_auth: Optional[str] = Field(default=None)
    token_filename: Optional[str] = Field(default=None)
    ticket_filename: Optional[str] = Field(default=None)
    cache: bool = Field(default=True)
    debug: bool = Field(default=False)

    def jssdk_settings(self) -> Dict[str, Any]:
        """Return engine options keyed by their wire names."""
        return {
            "corp": self.corp,
            "appId": self.app_id,
            "secret": self.secret,
            "nonceStrLength": self.nonce_str_length,
            "type": self.persistence_type,
            "redisHost": self.redis_host,
            "redisPort": self.redis_port,
            "redisAuth": self.redis_auth,
            "tokenFilename": self.token_filename,
            "ticketFilename": self.ticket_filename,
            "cache": self.cache,
            "debug": self.debug,
        }


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides: Any) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
