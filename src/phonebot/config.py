"""
Application configuration with environment-driven settings.

All values are read once at startup; a missing or malformed value fails
the process before the first activity is served.
"""

from functools import lru_cache
import os
from enum import Enum
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TelephonyProviderType(str, Enum):
    """Supported telephony bridge implementations."""

    HTTP = "http"
    MOCK = "mock"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application
    app_name: str = "phonebot"
    app_env: Literal["dev", "qa", "uat", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"

    # Identity provider
    authority_template: str = Field(
        default="https://login.microsoftonline.com/{0}",
        description="Authority URL template, {0} is replaced by the tenant id",
    )
    microsoft_app_id: str = Field(
        description="Application (client) id registered with the identity provider",
    )
    microsoft_app_password: str = Field(
        description="Application client secret",
    )

    # Directory (Microsoft Graph)
    api_url: str = Field(
        default="https://graph.microsoft.com/",
        description="Directory API base URL, also the resource of the default scope",
    )
    graph_api_version: str = Field(default="v1.0")
    directory_timezone: str = Field(
        default="UTC",
        description="Time zone sent in the Prefer: outlook.timezone header",
    )

    # Telephony bridge
    dispatch_url_template: str = Field(
        description="Dispatch URL template, {0} is the caller suffix and {1} the callee suffix",
    )
    telephony_provider: TelephonyProviderType = Field(default=TelephonyProviderType.HTTP)

    # Bot Framework connector
    bot_connector_tenant: str = Field(default="botframework.com")
    bot_connector_scope: str = Field(default="https://api.botframework.com/.default")

    # Timeouts
    http_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    invoke_timeout_seconds: float = Field(default=60.0, gt=0, le=600)

    @field_validator(
        "authority_template",
        "microsoft_app_id",
        "microsoft_app_password",
        "api_url",
        "dispatch_url_template",
    )
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("authority_template")
    @classmethod
    def validate_authority_template(cls, v: str) -> str:
        """The template must render a tenant id into the URL."""
        try:
            rendered = v.format("tenant-check")
        except (IndexError, KeyError, ValueError) as e:
            raise ValueError(f"authority template does not render: {e}") from e
        if "tenant-check" not in rendered:
            raise ValueError("authority template has no tenant placeholder")
        return v

    @field_validator("dispatch_url_template")
    @classmethod
    def validate_dispatch_template(cls, v: str) -> str:
        """The template must render both the caller and the callee suffix."""
        try:
            rendered = v.format("11111", "22222")
        except (IndexError, KeyError, ValueError) as e:
            raise ValueError(f"dispatch URL template does not render: {e}") from e
        if "11111" not in rendered or "22222" not in rendered:
            raise ValueError("dispatch URL template needs two positional placeholders")
        return v

    def authority(self, tenant_id: str) -> str:
        """Authority URL for a tenant."""
        return self.authority_template.format(tenant_id)

    def token_endpoint(self, tenant_id: str) -> str:
        """OAuth2 v2 token endpoint under the tenant authority."""
        return f"{self.authority(tenant_id).rstrip('/')}/oauth2/v2.0/token"

    @property
    def directory_scope(self) -> str:
        """Application-only default scope of the directory API."""
        return f"{self.api_url.rstrip('/')}/.default"

    @property
    def users_endpoint(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.graph_api_version.strip('/')}/users"


@lru_cache
def _get_settings_cached() -> Settings:
    return Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    # Under pytest the environment is patched per test, so never serve a cached instance.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return Settings()  # type: ignore[call-arg]
    return _get_settings_cached()
