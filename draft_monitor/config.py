"""
Environment driven configuration for the draft monitor Lambda.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

ENV_DEFAULTS = {
    "DYNAMODB_TABLE_NAME": "UKFFBot",
    "AWS_REGION": "us-east-1",
    "SLACK_API_URL": "https://slack.com/api",
    "SLEEPER_API_URL": "https://api.sleeper.app/v1",
    "HTTP_TIMEOUT_SECONDS": "10",
    "MAX_WORKERS": "5",
    "LOG_LEVEL": "INFO",
    "BOTO3_LOG_LEVEL": "ERROR",
}


def _env(name: str) -> str:
    return os.environ.get(name) or ENV_DEFAULTS[name]


def _env_int(name: str) -> int:
    raw = _env(name)
    try:
        value = int(raw)
        if value <= 0:
            raise ValueError(raw)
        return value
    except (ValueError, TypeError):
        logger.warning(f"Invalid {name}={raw!r}, using default {ENV_DEFAULTS[name]}")
        return int(ENV_DEFAULTS[name])


def _env_log_level(name: str) -> str:
    raw = _env(name).upper()
    # getLevelName maps known names to their number and anything else to a string
    if isinstance(logging.getLevelName(raw), int):
        return raw
    logger.warning(f"Invalid {name}={raw!r}, using default {ENV_DEFAULTS[name]}")
    return ENV_DEFAULTS[name]


@dataclass(frozen=True)
class MonitorConfig:
    table_name: str
    region: str
    slack_bot_token: Optional[str]
    slack_api_url: str
    sleeper_api_url: str
    http_timeout: int
    max_workers: int
    operator_channel_id: Optional[str]
    log_level: str
    boto3_log_level: str

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        """Build the config from Lambda environment variables."""
        return cls(
            table_name=_env("DYNAMODB_TABLE_NAME"),
            region=_env("AWS_REGION"),
            slack_bot_token=os.environ.get("SLACK_BOT_TOKEN"),
            slack_api_url=_env("SLACK_API_URL").rstrip("/"),
            sleeper_api_url=_env("SLEEPER_API_URL").rstrip("/"),
            http_timeout=_env_int("HTTP_TIMEOUT_SECONDS"),
            max_workers=_env_int("MAX_WORKERS"),
            operator_channel_id=os.environ.get("OPERATOR_CHANNEL_ID") or None,
            log_level=_env_log_level("LOG_LEVEL"),
            boto3_log_level=_env_log_level("BOTO3_LOG_LEVEL"),
        )
