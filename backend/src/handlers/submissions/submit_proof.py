"""
Submit Quest Proof Handler.
POST /quests/{questId}/submissions
Body: { "proofText": "...", "proofFileKey": "proofs/...", "proofFileType": "image/png" }
"""
from guildquest import events, members, quests
from guildquest.auth import get_user_sub, get_username
from guildquest.errors import GuildQuestError
from guildquest.gateway import submission_view
from guildquest.logging import logger, log_event
from guildquest.models import EventType
from guildquest.utils import error_response, format_response, get_path_param, parse_body


def handler(event, context):
    """
    Create a pending submission for peer review.
    The proof file (if any) must already be uploaded via the presigned URL.
    """
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    quest_id = get_path_param(event, 'questId')
    if not quest_id:
        return format_response(400, {'message': 'Missing questId'})

    body = parse_body(event)

    try:
        # Rewards need a profile to credit
        members.ensure_member(member_id, get_username(event))
        submission = quests.submit_proof(
            quest_id,
            member_id,
            proof_text=body.get('proofText'),
            proof_file_key=body.get('proofFileKey'),
            proof_file_type=body.get('proofFileType')
        )
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error submitting proof for quest {quest_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    view = submission_view(submission)
    events.emit_change(EventType.SUBMISSION_CREATED, view)
    logger.info(f"Member {member_id} submitted proof {submission['submissionId']} for quest {quest_id}")

    return format_response(201, {
        'message': 'Quest proof submitted for review!',
        'submission': view
    })
