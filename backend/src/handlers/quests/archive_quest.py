"""
Archive Quest Handler.
POST /quests/{questId}/archive
"""
from guildquest import events, quests
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.models import EventType
from guildquest.utils import error_response, format_response, get_path_param


def handler(event, context):
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    quest_id = get_path_param(event, 'questId')
    if not quest_id:
        return format_response(400, {'message': 'Missing questId'})

    try:
        quest = quests.archive_quest(quest_id, member_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error archiving quest {quest_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    events.emit_change(EventType.QUEST_ARCHIVED, quest)
    return format_response(200, {'message': 'Quest archived', 'quest': quest})
