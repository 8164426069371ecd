# --------------------------------------------------
# config.py
# --------------------------------------------------
# Environment-based configuration, read once at startup:
#   - LOG_LEVEL              (Verbose, Debug, Information, ...)
#   - LOG_LEVEL_OVERRIDES    (uvicorn=Warning,fastapi=Warning)
#   - LOG_FILE_PATH          (directory, empty disables the file sink)
#   - LOG_FILE_NAME
#   - LOG_FILE_SIZE_LIMIT_MB
#   - LOG_FILE_BACKUP_COUNT
#   - HOST / PORT            (uvicorn runner)
#
# Level names are validated when logging is set up:
# an unknown name aborts startup.
# --------------------------------------------------

import os
from typing import Dict

from .log_settings import to_log_level


class SimpleSettings:
    """
    Minimal settings loader for environment configuration.
    Values are read once at startup and used across the application.
    """

    # Minimum level for every logger without an override
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "Information")

    # Per-source minimum levels for library loggers
    LOG_LEVEL_OVERRIDES = os.environ.get("LOG_LEVEL_OVERRIDES", "uvicorn=Warning,fastapi=Warning")

    # Rolling file sink
    LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH", "logs")
    LOG_FILE_NAME = os.environ.get("LOG_FILE_NAME", "api.log")
    LOG_FILE_SIZE_LIMIT_MB = int(os.environ.get("LOG_FILE_SIZE_LIMIT_MB", "10"))
    LOG_FILE_BACKUP_COUNT = int(os.environ.get("LOG_FILE_BACKUP_COUNT", "31"))

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "8000"))


def parse_overrides(text: str) -> Dict[str, int]:
    """
    Parse "name=Level,other=Level" into {"name": levelno, ...}.

    Raises ValueError for malformed entries or unknown level names.
    """
    overrides: Dict[str, int] = {}
    for item in (text or "").split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, level = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid log level override: {item}")
        overrides[name.strip()] = to_log_level(level.strip())
    return overrides


# Global settings instance used throughout the application.
settings = SimpleSettings()
