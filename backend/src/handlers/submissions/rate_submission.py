"""
Rate Submission Handler.
POST /submissions/{submissionId}/ratings
Body: { "verdict": "approved" | "rejected" }
"""
from guildquest import events, gateway
from guildquest.auth import get_user_sub
from guildquest.errors import GuildQuestError, RewardApplicationFailed
from guildquest.logging import logger, log_event
from guildquest.models import EventType, SubmissionStatus
from guildquest.utils import error_response, format_response, get_path_param, parse_body


def handler(event, context):
    """
    Record the caller's verdict and return the submission's review state.

    Status codes:
        200 rating recorded (submission may have resolved)
        400 invalid verdict
        401 not authenticated
        403 rating own submission
        404 submission not found
        409 duplicate rating, submission already resolved, or concurrent vote (retry)
        500 submission completed but reward not applied (REWARD_APPLICATION_FAILED)
        503 storage unavailable (retry)
    """
    log_event(event)

    rater_id = get_user_sub(event)
    if not rater_id:
        return format_response(401, {'message': 'Unauthorized'})

    submission_id = get_path_param(event, 'submissionId')
    verdict = parse_body(event).get('verdict')

    if not submission_id or not verdict:
        return format_response(400, {'message': 'Missing submissionId or verdict'})

    try:
        view = gateway.rate(submission_id, rater_id, verdict)
    except RewardApplicationFailed as e:
        # Transition is persisted; reconcile_rewards will retry the reward
        logger.error(f"Reward not applied for submission {submission_id}: {e}")
        view = getattr(e, 'view', None)
        if view:
            publish_review(view, verdict)
        return format_response(e.status_code, {
            'message': str(e),
            'code': e.code,
            'submission': view
        })
    except GuildQuestError as e:
        logger.info(f"Rating rejected for submission {submission_id} by {rater_id}: {e.code}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error rating submission {submission_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    publish_review(view, verdict)
    logger.info(
        f"Submission {submission_id} rated {verdict} by {rater_id}: "
        f"{view['approvalCount']}/{view['rejectionCount']} -> {view['status']}"
    )

    return format_response(200, {
        'message': f"You {verdict} this quest submission",
        'submission': view,
        'yourVerdict': verdict
    })


def publish_review(view: dict, verdict: str) -> None:
    """Notify subscribed clients about the new rating and any review outcome."""
    events.emit_change(EventType.SUBMISSION_RATED, {**view, 'verdict': verdict})
    if view['status'] != SubmissionStatus.PENDING:
        events.emit_change(EventType.SUBMISSION_REVIEWED, view)
