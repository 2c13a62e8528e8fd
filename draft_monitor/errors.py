"""
Exception types raised by the draft monitor adapters.
DraftMonitor converts these into CycleOutcome values instead of letting them escape.
"""


class DraftMonitorError(Exception):
    """Base class for all draft monitor errors"""


class FeedError(DraftMonitorError):
    """Problem talking to or reading from the draft feed"""


class FeedUnavailableError(FeedError):
    """Sleeper could not be reached or answered with an HTTP error"""


class FeedNotFoundError(FeedError):
    """Sleeper has no draft (or no picks list) for the requested id"""


class MalformedFeedError(FeedError):
    """A draft or pick record is missing required fields"""


class DataIntegrityError(DraftMonitorError):
    """The pick feed regressed, skipped an index or went out of order"""


class PickOutOfRangeError(DraftMonitorError, ValueError):
    """Global pick index outside [1, team_count * total_rounds]"""


class NotificationDeliveryError(DraftMonitorError):
    """Slack rejected or never received a notification"""


class RegistrationStoreError(DraftMonitorError):
    """DynamoDB read or write of a draft registration failed"""
