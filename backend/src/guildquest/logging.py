"""
Logging utilities for Lambda handlers.

Handlers log through the shared 'guildquest' logger. Review decision code
(ledger, tally, policy, rewards, gateway) raises typed errors instead of
logging; the handler that called it decides what gets written.
"""
import logging
import os
import json

# Fields never written to the logs: request payloads and Cognito claims
REDACTED_KEYS = ('body', 'headers', 'multiValueHeaders')

logger = logging.getLogger('guildquest')
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)


def _summarize(event: dict) -> dict:
    summary = {k: v for k, v in event.items() if k not in REDACTED_KEYS}
    request_context = summary.get('requestContext')
    if isinstance(request_context, dict) and 'authorizer' in request_context:
        summary['requestContext'] = {k: v for k, v in request_context.items() if k != 'authorizer'}
    return summary


def log_event(event: dict) -> None:
    """Log incoming Lambda event without payloads or identity claims."""
    try:
        logger.info(f"Lambda event: {json.dumps(_summarize(event), default=str)}")
    except Exception as e:
        logger.warning(f"Could not log event: {e}")
