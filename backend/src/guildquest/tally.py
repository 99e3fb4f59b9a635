"""
Tally aggregator - approval and rejection counts derived from the ledger.
"""
from typing import Dict, Iterable, Any
from . import ledger
from .models import Verdict


def approval_rate(approvals: int, rejections: int) -> float:
    """Approval percentage (0-100); 0 when nobody has voted."""
    total = approvals + rejections
    if total == 0:
        return 0.0
    return approvals / total * 100


def tally_ratings(ratings: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Count verdicts in a collection of rating items.

    Returns:
        dict: {'approvals': int, 'rejections': int, 'rate': float}
    """
    approvals = rejections = 0
    for rating in ratings:
        if rating.get('verdict') == Verdict.APPROVED:
            approvals += 1
        elif rating.get('verdict') == Verdict.REJECTED:
            rejections += 1

    return {
        'approvals': approvals,
        'rejections': rejections,
        'rate': approval_rate(approvals, rejections)
    }


def tally(submission_id: str) -> Dict[str, Any]:
    """Recompute the tally for a submission from its full rating ledger."""
    return tally_ratings(ledger.ratings_for(submission_id))
