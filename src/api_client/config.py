"""Configuration for the TripManager backend client."""

import os
from dataclasses import dataclass, field
from enum import Enum


class ErrorCode(Enum):
    """Error codes for backend failures."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVER_ERROR = "SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNEXPECTED_RESPONSE = "UNEXPECTED_RESPONSE"


STATUS_ERROR_MAP: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTHENTICATION_REQUIRED,
    403: ErrorCode.INSUFFICIENT_PERMISSIONS,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    422: ErrorCode.VALIDATION_ERROR,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
}


@dataclass
class ApiConfig:
    """Backend connection settings."""

    base_url: str = "https://tripmanager.site/api"
    timeout_seconds: float = 30.0
    log_api_calls: bool = False
    default_headers: dict[str, str] = field(
        default_factory=lambda: {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    )

    @classmethod
    def from_env(cls) -> "ApiConfig":
        """Build a config from TRIPMANAGER_* environment variables."""
        config = cls()
        config.base_url = os.environ.get("TRIPMANAGER_API_URL", config.base_url).rstrip("/")
        timeout = os.environ.get("TRIPMANAGER_API_TIMEOUT")
        if timeout:
            config.timeout_seconds = float(timeout)
        config.log_api_calls = os.environ.get("TRIPMANAGER_LOG_API_CALLS", "").lower() in ("1", "true", "yes")
        return config


DEFAULT_API_CONFIG = ApiConfig()
