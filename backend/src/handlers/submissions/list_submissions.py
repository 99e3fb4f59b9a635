"""
List Quest Submissions Handler.
GET /quests/{questId}/submissions
"""
from guildquest import guilds, ledger, policy, quests
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.gateway import submission_view
from guildquest.logging import logger, log_event
from guildquest.s3_utils import generate_presigned_url
from guildquest.utils import error_response, format_response, get_path_param


def handler(event, context):
    """
    Submissions for a quest with review state, signed proof links and the
    caller's own verdict (so the UI can hide the rate buttons).
    """
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    quest_id = get_path_param(event, 'questId')
    if not quest_id:
        return format_response(400, {'message': 'Missing questId'})

    try:
        quest = quests.get_quest(quest_id)
        quests.require_guild_member(quest['guildId'], member_id)
        quorum = policy.quorum_for(guilds.guild_member_count(quest['guildId']))

        items = []
        for submission in quests.list_submissions(quest_id):
            view = submission_view(submission, quorum)
            view['proofText'] = submission.get('proofText')
            view['proofFileType'] = submission.get('proofFileType')
            view['proofFileUrl'] = generate_presigned_url(submission.get('proofFileKey'))
            view['yourVerdict'] = ledger.has_rated(submission['submissionId'], member_id)
            items.append(view)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing submissions for quest {quest_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, {'questId': quest_id, 'submissions': items})
