"""
Sleeper draft pick monitor.

Polls registered Sleeper drafts and posts one Slack message per new pick,
including who is on the clock next (snake and 3rd Round Reversal aware).
"""

from .composer import NotificationComposer
from .monitor import DraftMonitor
from .pick_order import resolve
from .types import CycleOutcome, CycleResult, DraftSettings, Pick, Registration

__all__ = [
    'NotificationComposer',
    'DraftMonitor',
    'resolve',
    'CycleOutcome',
    'CycleResult',
    'DraftSettings',
    'Pick',
    'Registration',
]
