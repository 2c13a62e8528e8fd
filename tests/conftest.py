"""
Shared fixtures and in-memory fakes for the draft monitor tests.

The fakes stand in for the Sleeper feed, the DynamoDB registration store and
the Slack notifier so the monitor can be driven cycle by cycle.
"""

from typing import Dict, List, Optional

import pytest

from draft_monitor.errors import NotificationDeliveryError
from draft_monitor.types import DraftSettings, DraftSnapshot, Pick, PlayerDescriptor, Registration


def make_picks(settings: DraftSettings, count: int) -> List[Pick]:
    """`count` well-formed picks in order, owned by whoever the slot says."""
    picks = []
    for index in range(1, count + 1):
        round_number = (index - 1) // settings.team_count + 1
        picks.append(Pick(
            global_index=index,
            round=round_number,
            picked_by=f"user{index}",
            metadata=PlayerDescriptor(first_name="Player", last_name=str(index), position="RB", team="KC"),
        ))
    return picks


class FakeFeed:
    def __init__(self, settings: DraftSettings, picks: List[Pick]):
        self.settings = settings
        self.picks = picks
        self.error: Optional[Exception] = None
        self.calls = 0

    def fetch(self, draft_id: str) -> DraftSnapshot:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return DraftSnapshot(draft_id=draft_id, settings=self.settings, picks=list(self.picks))


class FakeStore:
    def __init__(self, registrations: Optional[Dict[str, Registration]] = None):
        self.registrations = dict(registrations or {})
        self.writes: List[tuple] = []
        self.write_error: Optional[Exception] = None

    def get(self, draft_id: str) -> Optional[Registration]:
        return self.registrations.get(draft_id)

    def set_last_known_count(self, draft_id: str, count: int) -> None:
        if self.write_error is not None:
            raise self.write_error
        current = self.registrations[draft_id]
        self.registrations[draft_id] = Registration(draft_id, current.channel_id, count)
        self.writes.append((draft_id, count))

    def list_registrations(self) -> List[Registration]:
        return list(self.registrations.values())


class FakeNotifier:
    def __init__(self, fail_on_pick: Optional[int] = None):
        self.sent = []
        self.alerts = []
        self.fail_on_pick = fail_on_pick

    def send(self, channel_id, payload) -> None:
        if payload.pick_no == self.fail_on_pick:
            raise NotificationDeliveryError(f"channel_not_found for pick {payload.pick_no}")
        self.sent.append((channel_id, payload))

    def send_alert(self, channel_id, text) -> None:
        self.alerts.append((channel_id, text))


class FakeNameResolver:
    def __init__(self, names: Optional[Dict[str, str]] = None):
        self.names = names or {}

    def resolve(self, external_id: str) -> Optional[str]:
        return self.names.get(external_id)


@pytest.fixture
def ten_team_3rr():
    return DraftSettings(team_count=10, total_rounds=15, reversal_round=3)


@pytest.fixture
def ten_team_snake():
    return DraftSettings(team_count=10, total_rounds=15)
