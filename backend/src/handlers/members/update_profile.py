"""
Update Member Profile Handler.
PUT /members/me
Body: { "username": "...", "bio": "...", "avatarUrl": "https://..." }
"""
from guildquest import events, members
from guildquest.auth import get_user_sub, get_username
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.models import EventType
from guildquest.utils import error_response, format_response, parse_body


def handler(event, context):
    """Edit the caller's username, bio and avatar. Points and level are read-only."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    body = parse_body(event)

    try:
        members.ensure_member(member_id, get_username(event))
        member = members.update_profile(
            member_id,
            username=body.get('username'),
            bio=body.get('bio'),
            avatar_url=body.get('avatarUrl')
        )
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error updating profile {member_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    events.emit_change(EventType.PROFILE_UPDATED, {
        'memberId': member_id,
        'username': member.get('username')
    })

    return format_response(200, {
        'message': 'Profile updated successfully',
        'member': member
    })
