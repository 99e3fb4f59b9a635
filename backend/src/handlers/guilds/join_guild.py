"""
Join Guild Handler.
POST /guilds/{guildId}/join
"""
from guildquest import events, guilds, members
from guildquest.auth import get_user_sub, get_username
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.models import EventType
from guildquest.utils import error_response, format_response, get_path_param


def handler(event, context):
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    guild_id = get_path_param(event, 'guildId')
    if not guild_id:
        return format_response(400, {'message': 'Missing guildId'})

    try:
        members.ensure_member(member_id, get_username(event))
        membership = guilds.join_guild(guild_id, member_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error joining guild {guild_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    events.emit_change(EventType.GUILD_JOINED, membership)
    return format_response(200, {
        'message': 'You have successfully joined the guild.',
        'membership': membership
    })
