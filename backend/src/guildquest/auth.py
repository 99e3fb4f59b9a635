"""
Authentication utilities for extracting member info from Cognito tokens.
"""
from typing import Optional


def _claims(event: dict) -> dict:
    try:
        return event['requestContext']['authorizer']['claims'] or {}
    except (KeyError, TypeError):
        return {}


def get_user_sub(event: dict) -> Optional[str]:
    """
    Extract member id (Cognito sub) from authorizer claims.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        Member id string or None if not authenticated
    """
    return _claims(event).get('sub')


def get_username(event: dict) -> Optional[str]:
    """Display name for a new member profile: preferred username, then email prefix."""
    claims = _claims(event)
    username = claims.get('preferred_username') or claims.get('cognito:username')
    if username:
        return username
    email = claims.get('email')
    if email:
        return email.split('@', 1)[0]
    return None
