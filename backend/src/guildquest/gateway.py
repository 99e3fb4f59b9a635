"""
Submission gateway - the single entry point for rating a quest submission.

    rate() ─▶ ledger (read) ─▶ tally ─▶ policy ─▶ one atomic write ─▶ rewards

The atomic write inserts the rating and updates the submission's counts
and status together, conditioned on the submission still being pending
with exactly as many ratings as the ledger held when it was read
(ratingCount). Two raters racing on the deciding vote therefore cannot
both resolve the submission: the loser gets RatingConflict (still
pending) or SubmissionNotPending (already resolved) and may retry.
"""
from typing import Dict, Any
from . import guilds, ledger, policy, rewards, store, tally
from .config import config
from .errors import (
    ConditionFailed,
    DuplicateRating,
    RatingConflict,
    RewardApplicationFailed,
    SelfRatingNotAllowed,
    SubmissionNotFound,
    SubmissionNotPending,
)
from .models import SubmissionStatus
from .utils import utc_now


def submission_view(submission: Dict[str, Any], quorum: int = None) -> Dict[str, Any]:
    """Public representation of a submission's review state."""
    approvals = int(submission.get('approvalCount', 0))
    rejections = int(submission.get('rejectionCount', 0))
    view = {
        'submissionId': submission['submissionId'],
        'questId': submission.get('questId'),
        'guildId': submission.get('guildId'),
        'memberId': submission.get('memberId'),
        'status': submission.get('status', SubmissionStatus.PENDING),
        'approvalCount': approvals,
        'rejectionCount': rejections,
        'approvalRate': round(tally.approval_rate(approvals, rejections), 2),
        'rewardPoints': int(submission.get('rewardPoints', 0)),
        'submittedAt': submission.get('submittedAt'),
        'reviewedAt': submission.get('reviewedAt'),
    }
    if quorum is not None:
        view['quorum'] = quorum
    return view


def rate(submission_id: str, rater_id: str, verdict: str, now: str = None) -> Dict[str, Any]:
    """
    Record a rater's verdict and advance the submission's review.

    Args:
        submission_id: Submission being rated
        rater_id: Member casting the vote
        verdict: 'approved' or 'rejected'
        now: ISO timestamp, defaults to the current time

    Returns:
        Submission view with updated counts, status and quorum

    Raises:
        ValidationError: unknown verdict
        SubmissionNotFound / SubmissionNotPending / SelfRatingNotAllowed
        DuplicateRating: the rater already voted
        RatingConflict: another vote landed first, retry the call
        StorageUnavailable: transient storage failure, retry the call
        RewardApplicationFailed: the submission completed but the member's
            points were not updated (the exception's .view holds the result)
    """
    ledger.validate_verdict(verdict)
    key = {'submissionId': submission_id}

    submission = store.get(config.SUBMISSIONS_TABLE, key)
    if not submission:
        raise SubmissionNotFound(submission_id)

    status = submission.get('status', SubmissionStatus.PENDING)
    if status != SubmissionStatus.PENDING:
        raise SubmissionNotPending(submission_id, status)
    if submission.get('memberId') == rater_id and not config.ALLOW_SELF_RATING:
        raise SelfRatingNotAllowed(submission_id)

    ratings = ledger.ratings_for(submission_id)
    if any(r.get('ratedBy') == rater_id for r in ratings):
        raise DuplicateRating(submission_id, rater_id)

    now = now or utc_now()
    new_rating = ledger.rating_item(submission_id, rater_id, verdict, now)
    current = tally.tally_ratings(ratings + [new_rating])

    member_count = guilds.guild_member_count(submission['guildId'])
    target = policy.decide(current, member_count)

    changes = {
        'approvalCount': current['approvals'],
        'rejectionCount': current['rejections'],
        'ratingCount': len(ratings) + 1,
    }
    changes.update(policy.transition_changes(submission_id, status, target, now))

    submission_update = store.update_op(
        config.SUBMISSIONS_TABLE,
        key,
        changes,
        expected={'status': SubmissionStatus.PENDING, 'ratingCount': len(ratings)}
    )

    try:
        ledger.record(submission_id, rater_id, verdict, now=now, alongside=[submission_update])
    except ConditionFailed as e:
        latest = store.get(config.SUBMISSIONS_TABLE, key) or {}
        latest_status = latest.get('status', SubmissionStatus.PENDING)
        if latest_status != SubmissionStatus.PENDING:
            raise SubmissionNotPending(submission_id, latest_status) from e
        raise RatingConflict(submission_id) from e

    submission = {**submission, **changes}
    view = submission_view(submission, policy.quorum_for(member_count))

    if target == SubmissionStatus.COMPLETED:
        try:
            rewards.apply_reward(
                submission['memberId'],
                int(submission.get('rewardPoints', 0)),
                submission_id,
                now=now
            )
        except RewardApplicationFailed as e:
            e.view = view
            raise

    return view


def get_view(submission_id: str) -> Dict[str, Any]:
    """Current review state of a submission, with the guild's quorum."""
    submission = store.get(config.SUBMISSIONS_TABLE, {'submissionId': submission_id})
    if not submission:
        raise SubmissionNotFound(submission_id)
    return submission_view(submission, policy.quorum_for(guilds.guild_member_count(submission['guildId'])))
