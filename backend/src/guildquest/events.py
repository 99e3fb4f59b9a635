"""
Change notifications for the web client.

Every state change the UI displays (new quest, new submission, rating,
review outcome, reward) is published to EventBridge. The client's live
subscription channel is fed from these events, so publishing is
best-effort: a failed publish is logged and never undoes the write.
"""
import json
import boto3
from typing import Any, Dict
from .config import config
from .logging import logger

EVENT_SOURCE = 'guildquest.app'

events = boto3.client('events', region_name=config.AWS_REGION)


def emit_change(detail_type: str, detail: Dict[str, Any]) -> bool:
    """
    Publish a change event.

    Args:
        detail_type: One of models.EventType
        detail: JSON-serializable payload (Decimals are converted)

    Returns:
        True if EventBridge accepted the event, False otherwise
    """
    try:
        response = events.put_events(
            Entries=[{
                'Source': EVENT_SOURCE,
                'DetailType': detail_type,
                'Detail': json.dumps(detail, default=_json_default),
                'EventBusName': config.EVENT_BUS_NAME
            }]
        )
        if response.get('FailedEntryCount'):
            logger.warning(f"EventBridge rejected {detail_type} event: {response.get('Entries')}")
            return False
        return True
    except Exception as e:
        logger.warning(f"Failed to send {detail_type} event (non-critical): {e}")
        return False


def _json_default(value):
    # DynamoDB numbers come back as Decimal
    try:
        as_int = int(value)
        return as_int if as_int == value else float(value)
    except (TypeError, ValueError):
        return str(value)
