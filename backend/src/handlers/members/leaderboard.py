"""
Leaderboard Handler.
GET /leaderboard?limit=100
"""
from guildquest import members
from guildquest.config import config
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.utils import error_response, format_response, get_query_param


def handler(event, context):
    """Global ranking of members by quest points."""
    log_event(event)

    try:
        limit = int(get_query_param(event, 'limit', config.LEADERBOARD_LIMIT))
    except (TypeError, ValueError):
        return format_response(400, {'message': 'limit must be an integer'})
    limit = max(1, min(limit, config.LEADERBOARD_LIMIT))

    try:
        leaders = members.leaderboard(limit)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error loading leaderboard: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, {'leaders': leaders})
