"""
Get Submission Review Handler.
GET /submissions/{submissionId}
"""
from guildquest import gateway, ledger
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.utils import error_response, format_response, get_path_param


def handler(event, context):
    """Review state of one submission plus the caller's verdict, if any."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    submission_id = get_path_param(event, 'submissionId')
    if not submission_id:
        return format_response(400, {'message': 'Missing submissionId'})

    try:
        view = gateway.get_view(submission_id)
        your_verdict = ledger.has_rated(submission_id, member_id)
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error loading submission {submission_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    return format_response(200, {'submission': view, 'yourVerdict': your_verdict})
