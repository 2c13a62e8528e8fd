"""
DynamoDB access for draft registrations and Sleeper -> Slack name lookups.

Single table layout, keyed by PK/SK:
- PK=DRAFT,  SK=DRAFT#{draft_id}     slackChannelId, lastKnownPickCount
- PK=PLAYER, SK=SLEEPER#{sleeper_id} slackMemberId, slackName
"""

import logging
import re
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from draft_monitor.errors import RegistrationStoreError
from draft_monitor.types import Registration

logger = logging.getLogger(__name__)

DRAFT_PK = "DRAFT"
PLAYER_PK = "PLAYER"

SLACK_MEMBER_ID = re.compile(r"^[UW][A-Z0-9]{2,}$")


def get_table(table_name: str, region: Optional[str] = None):
    dynamodb = boto3.resource("dynamodb", region_name=region)
    return dynamodb.Table(table_name)


def _draft_key(draft_id: str) -> Dict[str, str]:
    return {"PK": DRAFT_PK, "SK": f"DRAFT#{draft_id}"}


def _item_to_registration(item: Dict[str, Any]) -> Registration:
    draft_id = item.get("draftId") or item["SK"].replace("DRAFT#", "", 1)
    # Numbers come back from DynamoDB as Decimal
    count = int(item.get("lastKnownPickCount") or 0)
    return Registration(
        draft_id=draft_id,
        channel_id=item.get("slackChannelId", ""),
        last_known_pick_count=count,
    )


class DynamoRegistrationStore:
    """Registration store backed by the bot's DynamoDB table"""

    def __init__(self, table):
        self.table = table

    @classmethod
    def from_config(cls, config) -> "DynamoRegistrationStore":
        return cls(get_table(config.table_name, config.region))

    def get(self, draft_id: str) -> Optional[Registration]:
        try:
            response = self.table.get_item(Key=_draft_key(draft_id))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error getting draft {draft_id} from DynamoDB: {e}")
            raise RegistrationStoreError(f"Could not read registration for {draft_id}") from e

        item = response.get("Item")
        if not item:
            return None
        return _item_to_registration(item)

    def set_last_known_count(self, draft_id: str, count: int) -> None:
        """Persist the pick count; the registration must still exist."""
        if count < 0:
            raise ValueError(f"Pick count cannot be negative: {count}")

        try:
            self.table.update_item(
                Key=_draft_key(draft_id),
                UpdateExpression="SET lastKnownPickCount = :count",
                ConditionExpression=Attr("PK").exists(),
                ExpressionAttributeValues={":count": count},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error saving pick count {count} for draft {draft_id}: {e}")
            raise RegistrationStoreError(f"Could not update pick count for {draft_id}") from e

        logger.info(f"Draft {draft_id}: lastKnownPickCount -> {count}")

    def save(self, registration: Registration) -> None:
        item = {
            **_draft_key(registration.draft_id),
            "draftId": registration.draft_id,
            "slackChannelId": registration.channel_id,
            "lastKnownPickCount": registration.last_known_pick_count,
        }
        try:
            self.table.put_item(Item=item)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error saving draft {registration.draft_id} to DynamoDB: {e}")
            raise RegistrationStoreError(f"Could not save registration for {registration.draft_id}") from e

    def delete(self, draft_id: str) -> bool:
        """Remove a registration. Returns False when nothing was registered."""
        try:
            response = self.table.delete_item(Key=_draft_key(draft_id), ReturnValues="ALL_OLD")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting draft {draft_id} from DynamoDB: {e}")
            raise RegistrationStoreError(f"Could not delete registration for {draft_id}") from e
        return bool(response.get("Attributes"))

    def list_registrations(self) -> List[Registration]:
        """All registered drafts, following DynamoDB pagination."""
        query_kwargs = {"KeyConditionExpression": Key("PK").eq(DRAFT_PK) & Key("SK").begins_with("DRAFT#")}
        registrations = []
        try:
            response = self.table.query(**query_kwargs)
            registrations.extend(_item_to_registration(i) for i in response.get("Items", []))

            while "LastEvaluatedKey" in response:
                response = self.table.query(ExclusiveStartKey=response["LastEvaluatedKey"], **query_kwargs)
                registrations.extend(_item_to_registration(i) for i in response.get("Items", []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing drafts from DynamoDB: {e}")
            raise RegistrationStoreError("Could not list registrations") from e

        return registrations

    def find_by_channel(self, channel_id: str) -> Optional[Registration]:
        for registration in self.list_registrations():
            if registration.channel_id == channel_id:
                return registration
        return None


class DynamoNameResolver:
    """Resolves Sleeper user ids to Slack mentions.

    Found mappings are memoised for the life of the instance. Misses are not,
    so a player who links their Slack account mid-draft shows up on the next pick.
    """

    def __init__(self, table):
        self.table = table
        self._cache: Dict[str, str] = {}

    @classmethod
    def from_config(cls, config) -> "DynamoNameResolver":
        return cls(get_table(config.table_name, config.region))

    def resolve(self, external_id: str) -> Optional[str]:
        if external_id in self._cache:
            return self._cache[external_id]

        response = self.table.get_item(Key={"PK": PLAYER_PK, "SK": f"SLEEPER#{external_id}"})
        item = response.get("Item") or {}

        member_id = item.get("slackMemberId")
        if member_id and SLACK_MEMBER_ID.match(member_id):
            handle = f"<@{member_id}>"
        else:
            handle = item.get("slackName") or member_id or None

        if handle is not None:
            self._cache[external_id] = handle
        return handle
