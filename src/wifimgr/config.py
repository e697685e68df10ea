"""Runtime settings for wifimgr.

Settings are read once from the environment (and a local ``.env`` file)
and then passed explicitly to the client, resolver and use cases. Nothing
downstream reads environment variables on its own.

Environment Variables:
    - MIST_API_TOKEN: API token sent as ``Authorization: Token <token>``
    - MIST_ORG_ID: Organization the sites and inventory belong to
    - MIST_BASE_URL: API base URL (default: https://api.mist.com)
    - WIFIMGR_CASE_INSENSITIVE: Match site names case-insensitively
    - WIFIMGR_MAX_CONCURRENT_SITES: Sites processed at once in CSV mode
    - WIFIMGR_NO_REASSIGN: Refuse to move devices already assigned elsewhere
    - WIFIMGR_REQUEST_TIMEOUT: Total per-request timeout in seconds
    - WIFIMGR_LOG_LEVEL: Logging level name
"""

import logging
import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .api.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mist.com"

_TRUE_VALUES = {"1", "true", "yes", "on"}

# Settings field -> environment variable
ENV_KEYS = {
    "api_token": "MIST_API_TOKEN",
    "org_id": "MIST_ORG_ID",
    "base_url": "MIST_BASE_URL",
    "case_insensitive": "WIFIMGR_CASE_INSENSITIVE",
    "max_concurrent_sites": "WIFIMGR_MAX_CONCURRENT_SITES",
    "no_reassign": "WIFIMGR_NO_REASSIGN",
    "request_timeout": "WIFIMGR_REQUEST_TIMEOUT",
    "log_level": "WIFIMGR_LOG_LEVEL",
}


def _env_bool(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in _TRUE_VALUES


class Settings(BaseModel):
    """Validated configuration value.

    Attributes:
        api_token: Token for the inventory API (required for API calls)
        org_id: Organization ID used for name lookups and assignment
        base_url: API base URL without trailing slash
        case_insensitive: Compare site names case-insensitively
        max_concurrent_sites: Upper bound on sites processed at once (1 = sequential)
        no_reassign: Ask the API not to move devices already assigned to a site
        request_timeout: Total timeout for a single HTTP request, in seconds
        log_level: Logging level name
    """

    api_token: Optional[str] = None
    org_id: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    case_insensitive: bool = False
    max_concurrent_sites: int = Field(default=1, ge=1)
    no_reassign: bool = False
    request_timeout: float = Field(default=60.0, gt=0)
    log_level: str = "WARNING"

    model_config = {"frozen": True}

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level '{value}'")
        return value

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> "Settings":
        """Build settings from environment variables.

        Args:
            env_file: Optional path to a .env file (default: search upwards from the working directory)
            **overrides: Values that take precedence over the environment;
                None values are ignored

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If a value fails validation
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))

        values: dict = {}
        for field_name, env_name in ENV_KEYS.items():
            if field_name in ("case_insensitive", "no_reassign"):
                raw = _env_bool(env_name)
            else:
                raw = os.getenv(env_name) or None
            if raw is not None:
                values[field_name] = raw

        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except PydanticValidationError as e:
            bad_fields = [str(err["loc"][0]) for err in e.errors() if err.get("loc")]
            raise ConfigurationError(
                f"Invalid configuration: {', '.join(ENV_KEYS.get(f, f) for f in bad_fields)}",
                details={"errors": [err["msg"] for err in e.errors()]},
                cause=e,
            )

    def require_api(self) -> None:
        """Check that everything needed to talk to the API is present.

        Raises:
            ConfigurationError: Naming the missing environment variables
        """
        missing = []
        if not self.api_token:
            missing.append(ENV_KEYS["api_token"])
        if not self.org_id:
            missing.append(ENV_KEYS["org_id"])
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                missing_keys=missing,
            )
