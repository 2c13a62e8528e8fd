from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict


class LambdaResponse(TypedDict, total=False):
    statusCode: int
    headers: Dict[str, str]
    isBase64Encoded: bool
    body: str


@dataclass(frozen=True)
class DraftSettings:
    """Settings of one Sleeper draft that drive pick order resolution"""
    team_count: int
    total_rounds: int
    reversal_round: Optional[int] = None
    draft_type: str = "snake"
    status: str = "drafting"
    # slot number -> owner's Sleeper user id
    draft_order: Dict[int, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if self.team_count <= 0:
            raise ValueError(f"team_count must be positive, got {self.team_count}")
        if self.total_rounds <= 0:
            raise ValueError(f"total_rounds must be positive, got {self.total_rounds}")
        if self.reversal_round is not None and self.reversal_round <= 0:
            # Sleeper reports 0 when the draft has no reversal round
            object.__setattr__(self, "reversal_round", None)

    @property
    def total_picks(self) -> int:
        return self.team_count * self.total_rounds

    @property
    def is_snake(self) -> bool:
        return self.draft_type == "snake"

    def owner_for_slot(self, slot: int) -> Optional[str]:
        return self.draft_order.get(slot)


@dataclass(frozen=True)
class PlayerDescriptor:
    """The drafted player as described by the pick metadata"""
    first_name: str
    last_name: str
    position: str = "N/A"
    team: str = "N/A"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Pick:
    """A single observed pick from the feed"""
    global_index: int
    round: int
    picked_by: str
    metadata: PlayerDescriptor
    timestamp: Optional[datetime] = None
    player_id: Optional[str] = None
    draft_slot: Optional[int] = None


@dataclass(frozen=True)
class DraftSnapshot:
    """Everything the feed returned for one draft in one fetch"""
    draft_id: str
    settings: DraftSettings
    picks: List[Pick]


@dataclass(frozen=True)
class Registration:
    """Binds a draft to a Slack channel and remembers how far we have read"""
    draft_id: str
    channel_id: str
    last_known_pick_count: int = 0


@dataclass(frozen=True)
class PickPosition:
    """Where a global pick index falls in the draft"""
    global_index: int
    round: int
    slot_in_round: int
    team_index: int
    is_reversed: bool


@dataclass(frozen=True)
class ResolvedPick:
    pick: Pick
    slot_in_round: int
    team_index: int
    is_reversed: bool

    @property
    def global_index(self) -> int:
        return self.pick.global_index

    @property
    def round(self) -> int:
        return self.pick.round


@dataclass(frozen=True)
class NextPicker:
    """Projection of who picks after the newest pick, or that nobody does"""
    position: Optional[PickPosition] = None
    owner_id: Optional[str] = None
    draft_complete: bool = False


@dataclass
class NotificationPayload:
    """What gets posted to Slack for one pick"""
    summary: str
    pick_no: int
    round: int
    slot_in_round: int
    player_name: str
    position: str
    picked_by_label: str
    next_picker_label: Optional[str] = None

    def to_slack_message(self) -> Dict[str, Any]:
        """Render as a chat.postMessage body (minus the channel)."""
        fields = [
            {"type": "mrkdwn", "text": f"*Round:*\n{self.round}"},
            {"type": "mrkdwn", "text": f"*Pick:*\n{self.pick_no}"},
            {"type": "mrkdwn", "text": f"*Player Drafted:*\n`{self.player_name}`"},
            {"type": "mrkdwn", "text": f"*Position:*\n{self.position}"},
            {"type": "mrkdwn", "text": f"*Picked By:*\n{self.picked_by_label}"},
        ]
        blocks = [
            {"type": "section", "text": {"type": "mrkdwn", "text": "*PICK ALERT!* :mega:"}},
            {"type": "section", "fields": fields},
        ]
        if self.next_picker_label is not None:
            blocks.append({"type": "divider"})
            blocks.append({
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*On The Clock:*\n{self.next_picker_label}"},
            })
        return {"text": self.summary, "blocks": blocks}


class CycleOutcome(Enum):
    ADVANCED = "advanced"
    NO_CHANGE = "no_change"
    NOT_REGISTERED = "not_registered"
    TRANSIENT = "transient"
    DATA_INTEGRITY = "data_integrity"
    DELIVERY_FAILURE = "delivery_failure"
    # the scheduler stopped waiting; the cycle may still finish and persist
    STILL_RUNNING = "still_running"


@dataclass
class CycleResult:
    """Typed result of one DraftMonitor cycle; the caller decides how to react"""
    draft_id: str
    outcome: CycleOutcome
    notifications_sent: int = 0
    previous_count: Optional[int] = None
    current_count: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (
            CycleOutcome.ADVANCED,
            CycleOutcome.NO_CHANGE,
            CycleOutcome.NOT_REGISTERED,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draft_id": self.draft_id,
            "outcome": self.outcome.value,
            "notifications_sent": self.notifications_sent,
            "previous_count": self.previous_count,
            "current_count": self.current_count,
            "error": self.error,
        }
