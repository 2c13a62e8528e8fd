"""
Slack Web API notifier (chat.postMessage over HTTPS).
"""

import logging
from typing import Any, Dict, Optional

import requests

from draft_monitor.errors import NotificationDeliveryError
from draft_monitor.types import NotificationPayload

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://slack.com/api"


class SlackNotifier:
    """Posts pick notifications and operator alerts to Slack channels"""

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL, timeout: int = 10,
                 session: Optional[requests.Session] = None):
        if not token:
            raise ValueError("A Slack bot token is required")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {token}"
        self.session.headers["Content-Type"] = "application/json; charset=utf-8"

    @classmethod
    def from_config(cls, config) -> "SlackNotifier":
        return cls(config.slack_bot_token, api_url=config.slack_api_url, timeout=config.http_timeout)

    def _post_message(self, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.api_url}/chat.postMessage"
        channel = body.get("channel")
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to post to Slack channel {channel}: {e}")
            raise NotificationDeliveryError(f"chat.postMessage to {channel} failed: {e}") from e

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            logger.error(f"Slack rejected message for channel {channel}: {error}")
            raise NotificationDeliveryError(f"chat.postMessage to {channel} rejected: {error}")

        return data

    def send(self, channel_id: str, payload: NotificationPayload) -> None:
        """Deliver one pick notification. Raises NotificationDeliveryError on failure."""
        self._post_message({"channel": channel_id, **payload.to_slack_message()})
        logger.info(f"Posted pick {payload.pick_no} to channel {channel_id}")

    def send_alert(self, channel_id: str, text: str) -> None:
        self._post_message({"channel": channel_id, "text": f":rotating_light: {text}"})
