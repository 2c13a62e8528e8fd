"""
Draft Monitor Lambda Function
Triggered by EventBridge on a schedule; runs one monitor cycle per registered draft
"""

import json
import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import boto3

from draft_monitor.composer import NotificationComposer
from draft_monitor.config import MonitorConfig
from draft_monitor.dynamo import DynamoNameResolver, DynamoRegistrationStore
from draft_monitor.errors import DraftMonitorError
from draft_monitor.monitor import DraftMonitor
from draft_monitor.sleeper import SleeperClient
from draft_monitor.slack import SlackNotifier
from draft_monitor.types import CycleOutcome, CycleResult, LambdaResponse

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Ceiling for the whole tick; EventBridge fires again a minute later anyway
TICK_TIMEOUT_SECONDS = 45

# Global instances (for Lambda container reuse)
config = None
monitor = None
notifier = None
store = None

# draft id -> (frozen pick count, error) already reported to the operator
_alerted: Dict[str, Tuple[Optional[int], Optional[str]]] = {}


def configure_logging(cfg: MonitorConfig) -> None:
    logger.setLevel(cfg.log_level)
    boto3.set_stream_logger(name='boto3', level=cfg.boto3_log_level)
    boto3.set_stream_logger(name='botocore', level=cfg.boto3_log_level)


def get_monitor() -> DraftMonitor:
    """Get or create the monitor and its collaborators"""
    global config, monitor, notifier, store
    if monitor is None:
        config = MonitorConfig.from_env()
        configure_logging(config)
        store = DynamoRegistrationStore.from_config(config)
        notifier = SlackNotifier.from_config(config)
        monitor = DraftMonitor(
            feed=SleeperClient(config.sleeper_api_url, timeout=config.http_timeout),
            store=store,
            notifier=notifier,
            composer=NotificationComposer(DynamoNameResolver.from_config(config)),
        )
    return monitor


def _requested_draft_ids(event: Dict[str, Any]) -> List[str]:
    if event.get('draft_id'):
        return [str(event['draft_id'])]
    return [str(d) for d in event.get('draft_ids') or []]


def alert_operator(result: CycleResult) -> None:
    """Surface a frozen draft to the operator channel, if one is configured"""
    if not config or not config.operator_channel_id:
        logger.warning(f"No OPERATOR_CHANNEL_ID set; draft {result.draft_id} needs manual inspection")
        return
    signature = (result.previous_count, result.error)
    if _alerted.get(result.draft_id) == signature:
        logger.warning(f"Draft {result.draft_id} is still frozen; operator already alerted")
        return
    text = (
        f"Draft {result.draft_id} is frozen at pick {result.previous_count}: {result.error}. "
        f"Manual inspection required."
    )
    try:
        notifier.send_alert(config.operator_channel_id, text)
    except DraftMonitorError as e:
        logger.error(f"Failed to alert operator about draft {result.draft_id}: {str(e)}")
        return
    _alerted[result.draft_id] = signature


def handle_result(result: CycleResult) -> None:
    if result.outcome != CycleOutcome.DATA_INTEGRITY:
        _alerted.pop(result.draft_id, None)

    if result.outcome == CycleOutcome.ADVANCED:
        logger.info(
            f"Draft {result.draft_id}: posted {result.notifications_sent} picks "
            f"({result.previous_count} -> {result.current_count})"
        )
    elif result.outcome == CycleOutcome.TRANSIENT:
        logger.warning(f"Draft {result.draft_id}: transient failure, will retry next tick: {result.error}")
    elif result.outcome == CycleOutcome.DATA_INTEGRITY:
        logger.error(f"Draft {result.draft_id}: data integrity failure: {result.error}")
        alert_operator(result)
    elif result.outcome == CycleOutcome.DELIVERY_FAILURE:
        logger.error(
            f"Draft {result.draft_id}: delivery failed after {result.notifications_sent} messages: {result.error}"
        )
    elif result.outcome == CycleOutcome.STILL_RUNNING:
        logger.warning(f"Draft {result.draft_id}: {result.error}")


def _collect(draft_id: str, future: Future) -> CycleResult:
    if not future.done():
        future.cancel()
        return CycleResult(
            draft_id,
            CycleOutcome.STILL_RUNNING,
            error=f"cycle still running after {TICK_TIMEOUT_SECONDS}s; the next tick will pick it up",
        )
    try:
        return future.result()
    except Exception as e:
        logger.error(f"Draft {draft_id}: cycle crashed: {e!r}", exc_info=True)
        return CycleResult(draft_id, CycleOutcome.TRANSIENT, error=repr(e))


def run_all(draft_ids: List[str], max_workers: int) -> List[CycleResult]:
    """Run one cycle per draft; distinct drafts run in parallel within one tick deadline."""
    draft_ids = list(dict.fromkeys(draft_ids))
    if not draft_ids:
        return []

    executor = ThreadPoolExecutor(max_workers=min(max_workers, len(draft_ids)))
    try:
        future_to_draft = {
            executor.submit(monitor.run_cycle, draft_id): draft_id
            for draft_id in draft_ids
        }
        wait(future_to_draft, timeout=TICK_TIMEOUT_SECONDS)
    finally:
        # Do not block the response on cycles that overran the deadline
        executor.shutdown(wait=False)

    results = []
    for future, draft_id in future_to_draft.items():
        result = _collect(draft_id, future)
        handle_result(result)
        results.append(result)
    return results


def lambda_handler(event: Dict[str, Any], context: Any) -> LambdaResponse:
    """
    Main Lambda handler for the scheduled draft check
    """
    event = event or {}
    logger.info(f"Draft monitor Lambda triggered: {json.dumps(event, default=str)}")

    try:
        get_monitor()
        draft_ids = _requested_draft_ids(event)
        if not draft_ids:
            draft_ids = [r.draft_id for r in store.list_registrations()]

        if not draft_ids:
            logger.info("No drafts registered, nothing to monitor")

        results = run_all(draft_ids, config.max_workers)

        return _response(200, {
            'message': 'Draft monitoring completed successfully',
            'results': [r.to_dict() for r in results],
            'timestamp': datetime.utcnow().isoformat()
        })

    except Exception as e:
        logger.error(f"Draft monitoring failed: {str(e)}", exc_info=True)
        return _response(500, {
            'error': 'Draft monitoring failed',
            'message': str(e),
            'timestamp': datetime.utcnow().isoformat()
        })


def _response(status_code: int, body: Dict[str, Any]) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body, default=str),
    }


def warm_lambda():
    """
    Warm up the Lambda function by initializing components
    """
    try:
        logger.info("Warming up Lambda function...")
        get_monitor()
        logger.info("Lambda function warmed up successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to warm up Lambda: {str(e)}")
        return False


# Warm up on module import for faster cold starts
if os.environ.get('AWS_LAMBDA_FUNCTION_NAME'):
    warm_lambda()
