"""Configuration for the TripManager notification client."""

import os
from dataclasses import replace

from dotenv import load_dotenv

from src.api_client.config import ApiConfig
from src.logging_config.config import LoggingConfig
from src.notifications.config import DEFAULT_NOTIFICATION_CONFIG, NotificationConfig

load_dotenv()

# Backend
API_URL = os.getenv("TRIPMANAGER_API_URL", "https://tripmanager.site/api")
API_TIMEOUT = float(os.getenv("TRIPMANAGER_API_TIMEOUT", "30"))

# Push project used when requesting device tokens
PROJECT_ID = os.getenv("TRIPMANAGER_PROJECT_ID", DEFAULT_NOTIFICATION_CONFIG.project_id)

# Local key-value storage
STORAGE_PATH = os.getenv("TRIPMANAGER_STORAGE_PATH", ".tripmanager/storage.json")

# Daily trip check (local time)
DAILY_CHECK_ENABLED = os.getenv("TRIPMANAGER_DAILY_CHECK", "true").lower() in ("1", "true", "yes")
DAILY_CHECK_HOUR = int(os.getenv("TRIPMANAGER_DAILY_CHECK_HOUR", "6"))
DAILY_CHECK_MINUTE = int(os.getenv("TRIPMANAGER_DAILY_CHECK_MINUTE", "0"))


def api_config() -> ApiConfig:
    config = ApiConfig.from_env()
    config.base_url = API_URL.rstrip("/")
    config.timeout_seconds = API_TIMEOUT
    return config


def notification_config() -> NotificationConfig:
    return replace(
        DEFAULT_NOTIFICATION_CONFIG,
        project_id=PROJECT_ID,
        daily_check_enabled=DAILY_CHECK_ENABLED,
        daily_check_hour=DAILY_CHECK_HOUR,
        daily_check_minute=DAILY_CHECK_MINUTE,
    )


def logging_config() -> LoggingConfig:
    # TRIPMANAGER_LOG_LEVEL / TRIPMANAGER_LOG_FORMAT are applied by configure_logging
    return LoggingConfig()
