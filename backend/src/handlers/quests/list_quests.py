"""
List Active Quests Handler.
GET /guilds/{guildId}/quests
"""
from guildquest import quests
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
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
        role = quests.require_guild_member(guild_id, member_id)
        items = quests.list_active_quests(guild_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing quests for guild {guild_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, {
        'guildId': guild_id,
        'yourRole': role,
        'quests': items
    })
