"""
Completion policy - the submission review state machine.

    pending ──(total >= quorum, rate >= 80%)──▶ completed
       │
       └─────(total >= quorum, rate <  80%)──▶ rejected

Terminal states are final. The thresholds come from config
(APPROVAL_THRESHOLD, QUORUM_RATIO).
"""
import math
from typing import Dict, Any
from .config import config
from .errors import SubmissionNotPending
from .models import SubmissionStatus


def quorum_for(guild_member_count: int) -> int:
    """
    Minimum number of ratings before a submission can resolve.

    Half the guild, rounded up, and never less than one rating.
    """
    return max(1, math.ceil(guild_member_count * config.QUORUM_RATIO))


def decide(tally: Dict[str, Any], guild_member_count: int) -> str:
    """Status a pending submission should be in given its current tally."""
    total = tally['approvals'] + tally['rejections']
    if total < quorum_for(guild_member_count):
        return SubmissionStatus.PENDING
    if tally['rate'] >= config.APPROVAL_THRESHOLD:
        return SubmissionStatus.COMPLETED
    return SubmissionStatus.REJECTED


def can_transition(current: str, target: str) -> bool:
    if current in SubmissionStatus.TERMINAL:
        return False
    return target in (SubmissionStatus.PENDING,) + SubmissionStatus.TERMINAL


def transition_changes(submission_id: str, current: str, target: str, now: str) -> Dict[str, Any]:
    """
    Attribute changes for moving a submission from current to target.

    reviewedAt is only stamped when entering a terminal state.
    """
    if not can_transition(current, target):
        raise SubmissionNotPending(submission_id, current)

    changes = {'status': target}
    if target in SubmissionStatus.TERMINAL:
        changes['reviewedAt'] = now
    return changes
