"""
Rating ledger - one immutable rating per (submission, rater).

Ratings are keyed by submissionId + ratedBy, and every insert is
conditioned on that key being new, so the store itself refuses a second
vote even when two requests from the same rater race.
"""
from typing import Dict, List, Any, Optional
from . import store
from .config import config
from .errors import ConditionFailed, DuplicateRating, ValidationError
from .models import Verdict
from .utils import utc_now

RATING_KEY = ('submissionId', 'ratedBy')


def validate_verdict(verdict: str) -> str:
    if verdict not in Verdict.ALL:
        raise ValidationError(f"Invalid verdict '{verdict}', expected one of {', '.join(Verdict.ALL)}")
    return verdict


def rating_item(submission_id: str, rater_id: str, verdict: str, now: str = None) -> Dict[str, Any]:
    return {
        'submissionId': submission_id,
        'ratedBy': rater_id,
        'verdict': validate_verdict(verdict),
        'createdAt': now or utc_now()
    }


def record(
    submission_id: str,
    rater_id: str,
    verdict: str,
    now: str = None,
    alongside: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Append a rating to the ledger.

    Args:
        submission_id: Submission being rated
        rater_id: Member casting the vote
        verdict: Verdict.APPROVED or Verdict.REJECTED
        now: ISO timestamp, defaults to the current time
        alongside: Extra write operations committed in the same transaction
            as the rating (the gateway passes the submission update here)

    Returns:
        The recorded rating item

    Raises:
        DuplicateRating: the rater already has a rating for this submission
        ConditionFailed: one of the `alongside` operations was refused
            (index is relative to the full batch, the rating being 0)
    """
    item = rating_item(submission_id, rater_id, verdict, now)
    ops = [store.insert_op(config.RATINGS_TABLE, item, RATING_KEY)] + list(alongside or [])

    try:
        store.write(ops)
    except ConditionFailed as e:
        if e.index == 0:
            raise DuplicateRating(submission_id, rater_id) from e
        raise

    return item


def ratings_for(submission_id: str) -> List[Dict[str, Any]]:
    """The full ledger for a submission (strongly consistent)."""
    return store.query(config.RATINGS_TABLE, 'submissionId', submission_id, consistent=True)


def has_rated(submission_id: str, rater_id: str) -> Optional[str]:
    """Return the rater's verdict on the submission, or None if they have not voted."""
    item = store.get(config.RATINGS_TABLE, {'submissionId': submission_id, 'ratedBy': rater_id})
    return item.get('verdict') if item else None
