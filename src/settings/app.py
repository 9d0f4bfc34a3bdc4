"""Fetch client settings powered by Pydantic BaseSettings."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.fetch.config import ClientConfig


class FetchSettings(BaseSettings):
    """Fetch client configuration from FETCH_* environment variables.

    Unset values fall back to the base configuration.
    """

    model_config = SettingsConfigDict(
        env_prefix="FETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timeout: float | None = Field(default=None, gt=0)
    max_redirects: int | None = Field(default=None, ge=0)
    max_body_size: int | None = Field(default=None, ge=1)
    user_agent: str | None = None
    proxy_hostname: str = ""
    proxy_port: int | None = None
    proxy_username: str = ""
    proxy_password: str = ""
    auth_username: str = ""
    auth_password: str = ""
    passthrough: bool | None = None
    preserve_missing_validators: bool | None = None

    def to_client_config(self, base: ClientConfig | None = None) -> ClientConfig:
        """Build a client configuration from these settings.

        Args:
            base: Configuration providing fallback values.

        Returns:
            ClientConfig with environment overrides applied.
        """
        overrides: dict[str, Any] = {
            "timeout": self.timeout,
            "max_redirects": self.max_redirects,
            "max_body_size": self.max_body_size,
            "user_agent": self.user_agent,
            "proxy": {
                "hostname": self.proxy_hostname,
                "port": self.proxy_port,
                "username": self.proxy_username,
                "password": self.proxy_password,
            },
            "basic_auth": {
                "username": self.auth_username,
                "password": self.auth_password,
            },
        }
        if self.passthrough is not None:
            overrides["passthrough"] = self.passthrough
        if self.preserve_missing_validators is not None:
            overrides["preserve_missing_validators"] = self.preserve_missing_validators

        return (base or ClientConfig()).with_overrides(**overrides)


def get_settings() -> FetchSettings:
    """Get a settings instance."""
    return FetchSettings()
