"""Configuration settings for the REST client.

Settings are loaded from ``RESTCLIENT_*`` environment variables and an
optional ``.env`` file. They are only read when a client is built with
:meth:`restclient.RestClient.from_settings`; constructing a client
directly never touches the environment.
"""

from typing import Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..http.models import CachePolicy, ensure_absolute_url


class ClientSettings(BaseSettings):
    """Client settings loaded from environment variables.

    :param base_url: Absolute base URL every path resolves against
    :type base_url: Optional[str]
    :param timeout: Default request timeout in seconds
    :type timeout: float
    :param cache_policy: Default cache policy hint
    :type cache_policy: CachePolicy
    :param default_headers: Headers sent with every request unless overridden
    :type default_headers: Dict[str, str]
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="RESTCLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: Optional[str] = Field(None, description="Base URL for requests")
    timeout: float = Field(60.0, gt=0, description="Request timeout in seconds")
    cache_policy: CachePolicy = Field(
        CachePolicy.USE_PROTOCOL_CACHE_POLICY, description="Cache policy hint"
    )
    # Parsed from a JSON object, e.g. RESTCLIENT_DEFAULT_HEADERS='{"Accept": "application/json"}'
    default_headers: Dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("base_url")
    @classmethod
    def check_base_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return str(ensure_absolute_url(v))

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


def get_settings() -> ClientSettings:
    """Load settings from the current environment."""
    return ClientSettings()
