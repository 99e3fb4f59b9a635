"""
List Guilds Handler.
GET /guilds
"""
from guildquest import guilds
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.utils import error_response, format_response


def handler(event, context):
    """The caller's guilds and the public guilds they can join."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    try:
        result = guilds.list_guilds_for(member_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing guilds: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, result)
