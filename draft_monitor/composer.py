"""
Turns resolved picks into Slack notification payloads.
"""

import logging
from typing import List, Optional

from draft_monitor import pick_order
from draft_monitor.types import DraftSettings, NextPicker, NotificationPayload, Pick, ResolvedPick

logger = logging.getLogger(__name__)

DRAFT_COMPLETE = "draft complete"


def resolve_pick(settings: DraftSettings, pick: Pick) -> ResolvedPick:
    position = pick_order.resolve(settings, pick.global_index)
    if position.round != pick.round:
        logger.warning(
            f"Pick {pick.global_index} reports round {pick.round}, expected round {position.round}"
        )
    return ResolvedPick(
        pick=pick,
        slot_in_round=position.slot_in_round,
        team_index=position.team_index,
        is_reversed=position.is_reversed,
    )


def project_next_picker(settings: DraftSettings, picks_made: int) -> NextPicker:
    """Who is on the clock once `picks_made` picks are in."""
    if pick_order.is_draft_complete(settings, picks_made):
        return NextPicker(draft_complete=True)

    position = pick_order.resolve(settings, picks_made + 1)
    return NextPicker(position=position, owner_id=settings.owner_for_slot(position.team_index))


class NotificationComposer:
    def __init__(self, name_resolver=None):
        self.name_resolver = name_resolver

    def display_name(self, external_id: str) -> str:
        """Slack handle for a Sleeper user id, or the raw id when unknown."""
        fallback = f"User ID {external_id}"
        if self.name_resolver is None:
            return fallback
        try:
            handle = self.name_resolver.resolve(external_id)
        except Exception as e:
            logger.warning(f"Name lookup failed for {external_id}, using raw id: {e}")
            return fallback
        return handle or fallback

    def next_picker_label(self, next_picker: NextPicker) -> str:
        if next_picker.draft_complete:
            return DRAFT_COMPLETE
        if next_picker.owner_id:
            return self.display_name(next_picker.owner_id)
        return f"Slot {next_picker.position.team_index}"

    def compose(self, resolved: ResolvedPick, next_picker: Optional[NextPicker] = None) -> NotificationPayload:
        pick = resolved.pick
        player_name = pick.metadata.full_name or (pick.player_id or "Unknown player")
        picked_by_label = self.display_name(pick.picked_by)

        summary = f"Pick {pick.global_index}: {player_name} was selected by {picked_by_label}."
        label = None
        if next_picker is not None:
            label = self.next_picker_label(next_picker)
            if next_picker.draft_complete:
                summary += " The draft is complete!"
            else:
                summary += f" On the clock: {label}"

        return NotificationPayload(
            summary=summary,
            pick_no=pick.global_index,
            round=pick.round,
            slot_in_round=resolved.slot_in_round,
            player_name=player_name,
            position=pick.metadata.position,
            picked_by_label=picked_by_label,
            next_picker_label=label,
        )

    def compose_latest(self, settings: DraftSettings, picks: List[Pick]) -> Optional[NotificationPayload]:
        """Payload for the most recent pick, with the on-the-clock projection."""
        if not picks:
            return None
        latest = picks[-1]
        return self.compose(resolve_pick(settings, latest), project_next_picker(settings, len(picks)))
