"""
Runtime configuration for the lead backend.

Settings are read from the process environment (and a local .env file)
once at startup and passed explicitly into the clients and the
orchestrator.
"""

import logging
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Upstream endpoints, credentials and service behaviour switches"""

    model_config = ConfigDict(frozen=True)

    fieldroutes_base_url: str = "https://goforth.pestroutes.com"
    fieldroutes_auth_key: str = ""
    fieldroutes_auth_token: str = ""

    payrix_base_url: str = "https://payapi.fieldroutes.com"
    payrix_api_key: str = ""
    payrix_merchant_id: str = ""

    payment_gateway: str = "payrix"
    strict_payment_fields: bool = False
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    integrations_mode: str = "real"
    api_keys: List[str] = Field(default_factory=list)
    log_level: str = "INFO"

    @field_validator("fieldroutes_base_url", "payrix_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("integrations_mode")
    @classmethod
    def _normalize_mode(cls, value: str) -> str:
        mode = (value or "real").strip().lower()
        if mode in {"mock", "test"}:
            return "mock"
        return "real"

    @property
    def use_mock_integrations(self) -> bool:
        return self.integrations_mode == "mock"


_ENV_FIELDS = {
    "FIELDROUTES_BASE_URL": "fieldroutes_base_url",
    "FIELDROUTES_AUTH_KEY": "fieldroutes_auth_key",
    "FIELDROUTES_AUTH_TOKEN": "fieldroutes_auth_token",
    "PAYRIX_API_BASE_URL": "payrix_base_url",
    "PAYRIX_API_KEY": "payrix_api_key",
    "PAYRIX_MERCHANT_ID": "payrix_merchant_id",
    "PAYMENT_GATEWAY": "payment_gateway",
    "STRICT_PAYMENT_FIELDS": "strict_payment_fields",
    "HTTP_TIMEOUT_SECONDS": "http_timeout_seconds",
    "INTEGRATIONS_MODE": "integrations_mode",
    "LOG_LEVEL": "log_level",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ after loading .env

    Raises:
        ValidationError: If a value cannot be coerced (e.g. a non-numeric timeout)
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = environ.get(env_name)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()

    values["api_keys"] = [k.strip() for k in environ.get("API_KEYS", "").split(",") if k.strip()]

    try:
        settings = Settings(**values)
    except ValidationError as e:
        logger.error(f"Settings validation failed: {e}")
        raise

    if not settings.use_mock_integrations:
        if not (settings.fieldroutes_auth_key and settings.fieldroutes_auth_token):
            logger.warning("FieldRoutes credentials are not set; CRM calls will fail authentication.")
        if not settings.payrix_api_key:
            logger.warning("Payrix API key is not set; payment calls will fail authentication.")
    return settings
