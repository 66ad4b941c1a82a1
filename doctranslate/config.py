import os
import json
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# translateDocument tops out at roughly 20MB per document
BODY_LIMIT = 21 * 1024 * 1024

DEFAULT_API_BASE = "https://translate.googleapis.com/v3beta1"
DEFAULT_LOCATION = "global"
DEFAULT_TIMEOUT = 60.0


class ConfigurationError(Exception):
    """Raised at startup when required environment configuration is missing or invalid."""


class TranslatorSettings(BaseModel):
    """Process-wide configuration, built once by load_settings() and never mutated."""
    model_config = ConfigDict(frozen=True)

    project_id: str
    credential_info: Dict[str, Any] = Field(repr=False)
    location: str = DEFAULT_LOCATION
    api_base_url: str = DEFAULT_API_BASE
    request_timeout: float = DEFAULT_TIMEOUT
    body_limit: int = BODY_LIMIT


def _require(env: Mapping[str, str], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ConfigurationError(f"{key} is not set.")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> TranslatorSettings:
    """
    Reads the translator configuration from the environment.

    When no mapping is passed, a local .env file is merged into os.environ first.
    Raises ConfigurationError instead of returning partial settings.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    project_id = _require(environ, "GOOGLE_PROJECT_ID")
    raw_credential = _require(environ, "GOOGLE_CREDENTIAL_JSON")

    try:
        credential_info = json.loads(raw_credential)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"GOOGLE_CREDENTIAL_JSON is not valid JSON: {e.msg}") from e
    if not isinstance(credential_info, dict):
        raise ConfigurationError("GOOGLE_CREDENTIAL_JSON must be a JSON object.")

    timeout_raw = environ.get("TRANSLATE_REQUEST_TIMEOUT")
    try:
        request_timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
    except ValueError as e:
        raise ConfigurationError(f"TRANSLATE_REQUEST_TIMEOUT must be a number, got {timeout_raw!r}.") from e

    return TranslatorSettings(
        project_id=project_id,
        credential_info=credential_info,
        location=environ.get("GOOGLE_TRANSLATE_LOCATION") or DEFAULT_LOCATION,
        api_base_url=(environ.get("GOOGLE_TRANSLATE_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        request_timeout=request_timeout,
    )
