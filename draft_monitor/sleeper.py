"""
Sleeper API client for reading draft settings and picks.

Endpoints used:
- GET /draft/{draft_id}        draft settings, type, status and draft_order
- GET /draft/{draft_id}/picks  every pick made so far, in pick order

Raw JSON is converted into DraftSettings / Pick value objects here so that
malformed records never travel further into the monitor.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from draft_monitor.errors import FeedNotFoundError, FeedUnavailableError, MalformedFeedError
from draft_monitor.types import DraftSettings, DraftSnapshot, Pick, PlayerDescriptor

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sleeper.app/v1"


class SleeperClient:
    """Read-only client for the public Sleeper draft endpoints"""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: int = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/json"

    def _request(self, endpoint: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error fetching from {url}: {e}")
            raise FeedUnavailableError(f"Sleeper request to {endpoint} failed: {e}") from e

        if response.status_code == 404:
            raise FeedNotFoundError(f"Sleeper returned 404 for {endpoint}")

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"Sleeper API request failed: {response.status_code} - {response.text}")
            raise FeedUnavailableError(f"Sleeper request to {endpoint} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise FeedUnavailableError(f"Sleeper returned invalid JSON for {endpoint}") from e

    def get_draft(self, draft_id: str) -> Dict[str, Any]:
        draft = self._request(f"/draft/{draft_id}")
        # Sleeper answers 200 with a null body for unknown drafts
        if not draft:
            raise FeedNotFoundError(f"Draft {draft_id} not found on Sleeper")
        return draft

    def get_draft_picks(self, draft_id: str) -> List[Dict[str, Any]]:
        picks = self._request(f"/draft/{draft_id}/picks")
        if picks is None:
            raise FeedNotFoundError(f"No picks list for draft {draft_id}")
        if not isinstance(picks, list):
            raise MalformedFeedError(f"Picks for draft {draft_id} is not a list")
        return picks

    def fetch(self, draft_id: str) -> DraftSnapshot:
        """
        Fetch the current settings and full ordered pick list for a draft.

        Raises:
            FeedNotFoundError: Sleeper has no such draft
            FeedUnavailableError: network or HTTP failure
            MalformedFeedError: a record is missing required fields
        """
        draft = self.get_draft(draft_id)
        raw_picks = self.get_draft_picks(draft_id)

        observed_at = datetime.now(timezone.utc)
        settings = parse_draft_settings(draft)
        picks = [parse_pick(raw, i, observed_at) for i, raw in enumerate(raw_picks)]

        logger.debug(f"Fetched draft {draft_id}: {len(picks)} picks, {settings.team_count} teams")
        return DraftSnapshot(draft_id=draft_id, settings=settings, picks=picks)


def parse_draft_settings(draft: Dict[str, Any]) -> DraftSettings:
    """Build DraftSettings from a Sleeper draft object."""
    raw_settings = draft.get("settings") or {}

    # draft_order maps user_id -> slot; invert it so we can look up by slot
    draft_order: Dict[int, str] = {}
    for user_id, slot in (draft.get("draft_order") or {}).items():
        try:
            draft_order[int(slot)] = str(user_id)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring draft_order entry {user_id!r}: {slot!r}")

    team_count = raw_settings.get("teams") or len(draft_order)
    rounds = raw_settings.get("rounds")
    if not team_count or not rounds:
        raise MalformedFeedError(
            f"Draft {draft.get('draft_id')} is missing team count or rounds: {raw_settings}"
        )

    try:
        return DraftSettings(
            team_count=int(team_count),
            total_rounds=int(rounds),
            reversal_round=int(raw_settings.get("reversal_round") or 0) or None,
            draft_type=draft.get("type") or "snake",
            status=draft.get("status") or "unknown",
            draft_order=draft_order,
        )
    except (TypeError, ValueError) as e:
        raise MalformedFeedError(f"Invalid settings for draft {draft.get('draft_id')}: {e}") from e


def parse_pick(raw: Dict[str, Any], position: int, observed_at: Optional[datetime] = None) -> Pick:
    """
    Build a Pick from a Sleeper pick object.

    Args:
        raw: Pick object from /draft/{id}/picks
        position: 0-based position in the feed, used only for error messages
        observed_at: When the feed was read

    Raises:
        MalformedFeedError: if pick_no, round, picked_by or metadata is missing
    """
    missing = [key for key in ("pick_no", "round", "picked_by", "metadata") if not raw.get(key)]
    if missing:
        raise MalformedFeedError(f"Pick at index {position} is missing required fields: {', '.join(missing)}")

    metadata = raw["metadata"]
    if not isinstance(metadata, dict):
        raise MalformedFeedError(f"Pick at index {position} has non-object metadata")

    try:
        global_index = int(raw["pick_no"])
        round_number = int(raw["round"])
        draft_slot = int(raw["draft_slot"]) if raw.get("draft_slot") is not None else None
    except (TypeError, ValueError) as e:
        raise MalformedFeedError(f"Pick at index {position} has non-numeric fields: {e}") from e

    return Pick(
        global_index=global_index,
        round=round_number,
        picked_by=str(raw["picked_by"]),
        metadata=PlayerDescriptor(
            first_name=metadata.get("first_name") or "",
            last_name=metadata.get("last_name") or "",
            position=metadata.get("position") or "N/A",
            team=metadata.get("team") or "N/A",
        ),
        timestamp=observed_at,
        player_id=raw.get("player_id"),
        draft_slot=draft_slot,
    )
