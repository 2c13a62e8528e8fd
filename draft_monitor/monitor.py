"""
Draft Monitor - one reconciliation cycle per registered draft.

A cycle fetches the Sleeper feed, compares it with the stored pick count,
posts one Slack message per new pick in pick order and only then persists the
new count. Any failure leaves the stored count untouched, so the next
scheduled cycle simply retries the same range (duplicates are acceptable,
dropped notifications are not).

At most one cycle per draft may run at a time. Nothing here enforces that;
the scheduler does.
"""

import logging
from typing import List, Optional

from draft_monitor.composer import NotificationComposer, project_next_picker, resolve_pick
from draft_monitor.errors import (
    DataIntegrityError,
    FeedNotFoundError,
    FeedUnavailableError,
    MalformedFeedError,
    NotificationDeliveryError,
    RegistrationStoreError,
)
from draft_monitor.types import (
    CycleOutcome,
    CycleResult,
    DraftSettings,
    NotificationPayload,
    Pick,
)

logger = logging.getLogger(__name__)


def validate_picks(picks: List[Pick], last_known_pick_count: int, settings: DraftSettings) -> None:
    """
    Check the feed before anything is derived from it.

    Raises:
        DataIntegrityError: feed regressed, has a gap, is out of order,
            or runs past the last pick of the draft
    """
    if len(picks) < last_known_pick_count:
        raise DataIntegrityError(
            f"Feed regressed: {len(picks)} picks returned, {last_known_pick_count} previously seen"
        )

    for expected, pick in enumerate(picks, start=1):
        if pick.global_index != expected:
            raise DataIntegrityError(
                f"Pick sequence broken at position {expected}: got pick_no {pick.global_index}"
            )

    if len(picks) > settings.total_picks:
        raise DataIntegrityError(
            f"Feed has {len(picks)} picks but the draft only has {settings.total_picks}"
        )


class DraftMonitor:
    """
    Orchestrates fetch -> diff -> resolve -> notify -> persist for one draft.

    Collaborators are injected:
        feed: anything with fetch(draft_id) -> DraftSnapshot
        store: get(draft_id) and set_last_known_count(draft_id, count)
        notifier: send(channel_id, NotificationPayload)
        composer: NotificationComposer (defaults to one without name lookups)
    """

    def __init__(self, feed, store, notifier, composer: Optional[NotificationComposer] = None):
        self.feed = feed
        self.store = store
        self.notifier = notifier
        self.composer = composer or NotificationComposer()

    def build_notifications(self, settings: DraftSettings, picks: List[Pick],
                            last_known_pick_count: int) -> List[NotificationPayload]:
        """One payload per pick beyond last_known_pick_count, in pick order."""
        new_picks = picks[last_known_pick_count:]
        payloads = []
        for pick in new_picks:
            resolved = resolve_pick(settings, pick)
            next_picker = None
            if pick.global_index == len(picks):
                next_picker = project_next_picker(settings, len(picks))
            payloads.append(self.composer.compose(resolved, next_picker))
        return payloads

    def run_cycle(self, draft_id: str) -> CycleResult:
        """Run one reconciliation cycle. Never raises for expected failures."""
        try:
            registration = self.store.get(draft_id)
        except RegistrationStoreError as e:
            logger.warning(f"Draft Monitor: could not load registration for {draft_id}: {e}")
            return CycleResult(draft_id, CycleOutcome.TRANSIENT, error=str(e))

        if registration is None:
            logger.info(f"Draft Monitor: draft {draft_id} is not registered, skipping")
            return CycleResult(draft_id, CycleOutcome.NOT_REGISTERED)

        last_known = registration.last_known_pick_count

        try:
            snapshot = self.feed.fetch(draft_id)
        except (FeedUnavailableError, FeedNotFoundError) as e:
            logger.warning(f"Draft Monitor: feed unavailable for draft {draft_id}: {e}")
            return CycleResult(draft_id, CycleOutcome.TRANSIENT, previous_count=last_known, error=str(e))
        except MalformedFeedError as e:
            logger.error(f"Draft Monitor: malformed feed for draft {draft_id}: {e}")
            return CycleResult(draft_id, CycleOutcome.DATA_INTEGRITY, previous_count=last_known, error=str(e))

        settings, picks = snapshot.settings, snapshot.picks

        try:
            validate_picks(picks, last_known, settings)
        except DataIntegrityError as e:
            logger.error(f"Draft Monitor: data integrity problem in draft {draft_id}: {e}")
            return CycleResult(
                draft_id, CycleOutcome.DATA_INTEGRITY,
                previous_count=last_known, current_count=len(picks), error=str(e),
            )

        if len(picks) == last_known:
            logger.debug(f"Draft Monitor: no new picks in draft {draft_id} ({last_known})")
            return CycleResult(draft_id, CycleOutcome.NO_CHANGE, previous_count=last_known, current_count=last_known)

        logger.info(
            f"Draft Monitor: new picks detected in draft {draft_id}! "
            f"Pick count changed from {last_known} to {len(picks)}."
        )

        payloads = self.build_notifications(settings, picks, last_known)

        sent = 0
        for payload in payloads:
            try:
                self.notifier.send(registration.channel_id, payload)
            except NotificationDeliveryError as e:
                logger.error(
                    f"Draft Monitor: delivery of pick {payload.pick_no} failed for draft {draft_id}, "
                    f"not saving progress: {e}"
                )
                return CycleResult(
                    draft_id, CycleOutcome.DELIVERY_FAILURE, notifications_sent=sent,
                    previous_count=last_known, current_count=len(picks), error=str(e),
                )
            sent += 1

        try:
            self.store.set_last_known_count(draft_id, len(picks))
        except RegistrationStoreError as e:
            logger.warning(f"Draft Monitor: notified but could not save count for draft {draft_id}: {e}")
            return CycleResult(
                draft_id, CycleOutcome.TRANSIENT, notifications_sent=sent,
                previous_count=last_known, current_count=len(picks), error=str(e),
            )

        return CycleResult(
            draft_id, CycleOutcome.ADVANCED, notifications_sent=sent,
            previous_count=last_known, current_count=len(picks),
        )
