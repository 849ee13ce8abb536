"""openapi-mcp SDK — settings models and loading."""

from openapi_mcp.sdk.errors import SettingsValidationError
from openapi_mcp.sdk.loader import SettingsLoader
from openapi_mcp.sdk.models import Credentials, ServerSettings, TelemetrySettings

__all__ = [
    "Credentials",
    "ServerSettings",
    "SettingsLoader",
    "SettingsValidationError",
    "TelemetrySettings",
]
