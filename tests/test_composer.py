"""
NotificationComposer tests: labels, fallbacks and Slack rendering.
"""

from unittest.mock import Mock

from conftest import FakeNameResolver, make_picks
from draft_monitor.composer import (
    DRAFT_COMPLETE,
    NotificationComposer,
    project_next_picker,
    resolve_pick,
)
from draft_monitor.types import DraftSettings, NextPicker, Pick, PlayerDescriptor

SETTINGS = DraftSettings(
    team_count=4, total_rounds=3, reversal_round=3,
    draft_order={1: "alice", 2: "bob", 3: "carol", 4: "dave"},
)


def make_pick(index=5, picked_by="bob"):
    return Pick(
        global_index=index,
        round=2,
        picked_by=picked_by,
        metadata=PlayerDescriptor(first_name="Bijan", last_name="Robinson", position="RB", team="ATL"),
    )


def test_compose_with_resolved_names():
    composer = NotificationComposer(FakeNameResolver({"bob": "<@U0BOB>", "dave": "<@U0DAVE>"}))
    resolved = resolve_pick(SETTINGS, make_pick())
    next_picker = project_next_picker(SETTINGS, 5)

    payload = composer.compose(resolved, next_picker)

    assert payload.pick_no == 5
    assert payload.round == 2
    assert payload.slot_in_round == 1
    assert payload.player_name == "Bijan Robinson"
    assert payload.position == "RB"
    assert payload.picked_by_label == "<@U0BOB>"
    # Pick 6 is round 2 slot 2, reversed -> draft slot 3 (carol), not in the resolver
    assert payload.next_picker_label == "User ID carol"
    assert payload.summary == (
        "Pick 5: Bijan Robinson was selected by <@U0BOB>. On the clock: User ID carol"
    )


def test_unknown_picker_falls_back_to_raw_id():
    composer = NotificationComposer(FakeNameResolver())
    payload = composer.compose(resolve_pick(SETTINGS, make_pick(picked_by="999")))

    assert payload.picked_by_label == "User ID 999"
    assert payload.next_picker_label is None


def test_resolver_errors_do_not_fail_the_notification():
    resolver = Mock()
    resolver.resolve.side_effect = RuntimeError("DynamoDB throttled")
    composer = NotificationComposer(resolver)

    payload = composer.compose(resolve_pick(SETTINGS, make_pick()), project_next_picker(SETTINGS, 5))

    assert payload.picked_by_label == "User ID bob"
    assert payload.next_picker_label == "User ID carol"


def test_no_resolver_uses_raw_ids():
    payload = NotificationComposer().compose(resolve_pick(SETTINGS, make_pick()))
    assert payload.picked_by_label == "User ID bob"


def test_slot_label_when_draft_order_is_empty():
    settings = DraftSettings(team_count=4, total_rounds=3)
    composer = NotificationComposer()

    label = composer.next_picker_label(project_next_picker(settings, 4))

    # Pick 5 opens the reversed second round with draft slot 4
    assert label == "Slot 4"


def test_draft_complete_projection():
    projection = project_next_picker(SETTINGS, 12)
    assert projection == NextPicker(draft_complete=True)

    payload = NotificationComposer().compose(resolve_pick(SETTINGS, make_pick(index=12)), projection)

    assert payload.next_picker_label == DRAFT_COMPLETE
    assert payload.summary.endswith("The draft is complete!")


def test_projection_carries_owner():
    projection = project_next_picker(SETTINGS, 8)

    # Pick 9 opens round 3, which 3RR turns backward
    assert projection.position.round == 3
    assert projection.position.team_index == 4
    assert projection.owner_id == "dave"


def test_missing_player_name_uses_player_id():
    pick = Pick(
        global_index=1, round=1, picked_by="alice",
        metadata=PlayerDescriptor(first_name="", last_name=""), player_id="4046",
    )
    payload = NotificationComposer().compose(resolve_pick(SETTINGS, pick))
    assert payload.player_name == "4046"
    assert payload.position == "N/A"


def test_slack_rendering_includes_on_the_clock_section():
    composer = NotificationComposer(FakeNameResolver({"carol": "<@U0CAROL>"}))
    payload = composer.compose(resolve_pick(SETTINGS, make_pick()), project_next_picker(SETTINGS, 5))

    message = payload.to_slack_message()

    assert message["text"] == payload.summary
    assert message["blocks"][0]["text"]["text"] == "*PICK ALERT!* :mega:"
    field_texts = [f["text"] for f in message["blocks"][1]["fields"]]
    assert "*Round:*\n2" in field_texts
    assert "*Pick:*\n5" in field_texts
    assert "*Player Drafted:*\n`Bijan Robinson`" in field_texts
    assert message["blocks"][-1]["text"]["text"] == "*On The Clock:*\n<@U0CAROL>"


def test_slack_rendering_without_projection_has_no_divider():
    payload = NotificationComposer().compose(resolve_pick(SETTINGS, make_pick()))
    blocks = payload.to_slack_message()["blocks"]
    assert [b["type"] for b in blocks] == ["section", "section"]


def test_compose_latest():
    settings = DraftSettings(team_count=4, total_rounds=3, draft_order=SETTINGS.draft_order)
    picks = make_picks(settings, 6)

    payload = NotificationComposer().compose_latest(settings, picks)

    assert payload.pick_no == 6
    # Pick 7 is round 2 slot 3, reversed -> draft slot 2
    assert payload.next_picker_label == "User ID bob"


def test_compose_latest_without_picks():
    assert NotificationComposer().compose_latest(SETTINGS, []) is None
