"""
Create Quest Handler.
POST /guilds/{guildId}/quests
Body: { "title": "...", "description": "...", "difficulty": "easy|medium|hard", "deadline": "YYYY-MM-DD" }
"""
from guildquest import events, quests
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.models import EventType, QuestDifficulty
from guildquest.utils import error_response, format_response, get_path_param, parse_body


def handler(event, context):
    """Quest masters and guild admins create quests for their guild."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    guild_id = get_path_param(event, 'guildId')
    if not guild_id:
        return format_response(400, {'message': 'Missing guildId'})

    body = parse_body(event)

    try:
        quest = quests.create_quest(
            guild_id,
            member_id,
            title=body.get('title'),
            description=body.get('description'),
            difficulty=body.get('difficulty') or QuestDifficulty.MEDIUM,
            deadline=body.get('deadline')
        )
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating quest in guild {guild_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    events.emit_change(EventType.QUEST_CREATED, quest)
    logger.info(f"Quest {quest['questId']} ({quest['difficulty']}, {quest['points']} QP) created in guild {guild_id}")

    return format_response(201, {
        'message': 'The quest has been successfully created.',
        'quest': quest
    })
