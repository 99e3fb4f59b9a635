"""
Get Guild Handler.
GET /guilds/{guildId}
"""
from guildquest import guilds
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.utils import error_response, format_response, get_path_param


def handler(event, context):
    """Guild details with the member roster and the caller's role."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    guild_id = get_path_param(event, 'guildId')
    if not guild_id:
        return format_response(400, {'message': 'Missing guildId'})

    try:
        detail = guilds.get_guild_detail(guild_id, member_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error loading guild {guild_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, detail)
