"""
Reward dispatcher - credits quest points when a submission completes.

The member's points and level are written in one transaction together
with the submission's rewardedAt stamp:

  * members:      questPoints/level SET, only if questPoints is unchanged
  * submissions:  rewardedAt SET, only if status = completed and no
                  rewardedAt exists yet

so a reward can never be applied twice for the same submission, and a
concurrent reward for another submission of the same member cannot be
overwritten.
"""
from typing import Dict, Any
from . import store
from .config import config
from .errors import ConditionFailed, RewardApplicationFailed, StorageUnavailable
from .gamification import calculate_level
from .models import SubmissionStatus
from .utils import utc_now

# Compare-and-set attempts when other rewards change the member's points
MAX_MEMBER_UPDATE_ATTEMPTS = 5


def _already_rewarded(submission_id: str) -> bool:
    submission = store.get(config.SUBMISSIONS_TABLE, {'submissionId': submission_id})
    return bool(submission and submission.get('rewardedAt'))


def _load_member(member_id: str, quest_points: int, submission_id: str) -> Dict[str, Any]:
    try:
        member = store.get(config.MEMBERS_TABLE, {'memberId': member_id})
    except StorageUnavailable as e:
        raise RewardApplicationFailed(submission_id, member_id, quest_points, str(e)) from e
    if not member:
        raise RewardApplicationFailed(submission_id, member_id, quest_points, 'member profile missing')
    return member


def apply_reward(member_id: str, quest_points: int, submission_id: str, now: str = None) -> Dict[str, Any]:
    """
    Add a completed quest's points to the submitting member.

    When another reward for the same member lands between the read and
    the write, the member is re-read and the update retried, up to
    MAX_MEMBER_UPDATE_ATTEMPTS times.

    Args:
        member_id: Member who submitted the proof
        quest_points: Points of the completed quest
        submission_id: The completed submission (double-application guard)
        now: ISO timestamp, defaults to the current time

    Returns:
        The member item after the reward. If this submission was already
        rewarded, the member is returned unchanged.

    Raises:
        RewardApplicationFailed: the reward was not applied and the
            submission still needs reconciliation
    """
    now = now or utc_now()
    reason = ''

    for _ in range(MAX_MEMBER_UPDATE_ATTEMPTS):
        member = _load_member(member_id, quest_points, submission_id)
        points_before = int(member.get('questPoints', 0))
        new_points = points_before + quest_points
        new_level = calculate_level(new_points)

        ops = [
            store.update_op(
                config.MEMBERS_TABLE,
                {'memberId': member_id},
                {'questPoints': new_points, 'level': new_level, 'updatedAt': now},
                expected={'questPoints': points_before}
            ),
            store.update_op(
                config.SUBMISSIONS_TABLE,
                {'submissionId': submission_id},
                {'rewardedAt': now},
                expected={'status': SubmissionStatus.COMPLETED, 'rewardedAt': None}
            ),
        ]

        try:
            store.write(ops)
        except ConditionFailed as e:
            if e.index == 0:
                # Member's points moved since the read
                reason = str(e)
                continue
            try:
                rewarded = _already_rewarded(submission_id)
            except StorageUnavailable as lookup_error:
                raise RewardApplicationFailed(submission_id, member_id, quest_points, str(e)) from lookup_error
            if rewarded:
                return member
            raise RewardApplicationFailed(submission_id, member_id, quest_points, str(e)) from e
        except StorageUnavailable as e:
            raise RewardApplicationFailed(submission_id, member_id, quest_points, str(e)) from e

        return {**member, 'questPoints': new_points, 'level': new_level, 'updatedAt': now}

    raise RewardApplicationFailed(
        submission_id, member_id, quest_points,
        f"member points kept changing after {MAX_MEMBER_UPDATE_ATTEMPTS} attempts ({reason})"
    )


def reconcile_rewards(now: str = None) -> Dict[str, Any]:
    """
    Apply rewards that were lost after a submission completed.

    Finds completed submissions without rewardedAt and retries the reward
    for each. Safe to run at any time: apply_reward is idempotent per
    submission.

    Returns:
        dict: {'checked': int, 'rewarded': [submissionId], 'failed': [{'submissionId', 'reason'}]}
    """
    unrewarded = store.query(
        config.SUBMISSIONS_TABLE,
        'status',
        SubmissionStatus.COMPLETED,
        index_name='byStatus',
        filters={'rewardedAt': None}
    )

    rewarded, failed = [], []
    for submission in unrewarded:
        submission_id = submission['submissionId']
        try:
            apply_reward(
                submission['memberId'],
                int(submission.get('rewardPoints', 0)),
                submission_id,
                now=now
            )
            rewarded.append(submission_id)
        except RewardApplicationFailed as e:
            failed.append({'submissionId': submission_id, 'reason': str(e)})

    return {
        'checked': len(unrewarded),
        'rewarded': rewarded,
        'failed': failed
    }
