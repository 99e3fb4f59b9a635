"""
Proof Upload URL Handler.
POST /quests/{questId}/proof-upload
Body: { "fileName": "screenshot.png", "contentType": "image/png" }
"""
from guildquest import quests
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.s3_utils import create_proof_upload
from guildquest.utils import error_response, format_response, get_path_param, parse_body


def handler(event, context):
    """Return a presigned S3 PUT URL and the file key to pass to submit_proof."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    quest_id = get_path_param(event, 'questId')
    body = parse_body(event)
    file_name = body.get('fileName')
    content_type = body.get('contentType')

    if not quest_id or not file_name or not content_type:
        return format_response(400, {'message': 'Missing questId, fileName or contentType'})

    try:
        quest = quests.get_quest(quest_id)
        quests.require_guild_member(quest['guildId'], member_id)
        upload = create_proof_upload(member_id, file_name, content_type)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating upload URL for quest {quest_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, upload)
