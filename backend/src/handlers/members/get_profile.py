"""
Get Member Profile Handler.
GET /members/{memberId}   (GET /members/me for the caller)
"""
from guildquest import members
from guildquest.auth import get_user_sub, get_username
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.utils import error_response, format_response, get_path_param


def handler(event, context):
    log_event(event)

    caller_id = get_user_sub(event)
    if not caller_id:
        return format_response(401, {'message': 'Unauthorized'})

    member_id = get_path_param(event, 'memberId')
    is_own_profile = member_id in (None, 'me', caller_id)
    if is_own_profile:
        member_id = caller_id

    try:
        if is_own_profile:
            members.ensure_member(caller_id, get_username(event))
        profile = members.get_profile(member_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error loading profile {member_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    profile['isOwnProfile'] = is_own_profile
    return format_response(200, profile)
