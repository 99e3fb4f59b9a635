"""
Typed errors raised by the guild quests core.

Every error carries the HTTP status and machine code the API handlers
return, so handlers only need to catch GuildQuestError.
"""


class GuildQuestError(Exception):
    """Base class for all domain errors."""
    status_code = 500
    code = 'INTERNAL_ERROR'


class ValidationError(GuildQuestError, ValueError):
    """Raised when request input is malformed or out of range."""
    status_code = 400
    code = 'VALIDATION_ERROR'


class PermissionDenied(GuildQuestError):
    """Raised when the caller lacks the guild role an operation needs."""
    status_code = 403
    code = 'PERMISSION_DENIED'


class NotFound(GuildQuestError):
    status_code = 404
    code = 'NOT_FOUND'


class SubmissionNotFound(NotFound):
    code = 'SUBMISSION_NOT_FOUND'

    def __init__(self, submission_id: str):
        super().__init__(f"Submission {submission_id} not found")
        self.submission_id = submission_id


class QuestNotFound(NotFound):
    code = 'QUEST_NOT_FOUND'

    def __init__(self, quest_id: str):
        super().__init__(f"Quest {quest_id} not found")
        self.quest_id = quest_id


class GuildNotFound(NotFound):
    code = 'GUILD_NOT_FOUND'

    def __init__(self, guild_id: str):
        super().__init__(f"Guild {guild_id} not found")
        self.guild_id = guild_id


class MemberNotFound(NotFound):
    code = 'MEMBER_NOT_FOUND'

    def __init__(self, member_id: str):
        super().__init__(f"Member {member_id} not found")
        self.member_id = member_id


class DuplicateRating(GuildQuestError):
    """The rater already voted on this submission. No state was changed."""
    status_code = 409
    code = 'DUPLICATE_RATING'

    def __init__(self, submission_id: str, rater_id: str):
        super().__init__(f"Member {rater_id} already rated submission {submission_id}")
        self.submission_id = submission_id
        self.rater_id = rater_id


class SubmissionNotPending(GuildQuestError):
    """The submission already reached a terminal status. No state was changed."""
    status_code = 409
    code = 'SUBMISSION_NOT_PENDING'

    def __init__(self, submission_id: str, status: str):
        super().__init__(f"Submission {submission_id} is {status}, not pending")
        self.submission_id = submission_id
        self.status = status


class SelfRatingNotAllowed(PermissionDenied):
    code = 'SELF_RATING_NOT_ALLOWED'

    def __init__(self, submission_id: str):
        super().__init__(f"Members cannot rate their own submission {submission_id}")
        self.submission_id = submission_id


class GuildFull(GuildQuestError):
    status_code = 409
    code = 'GUILD_FULL'


class AlreadyMember(GuildQuestError):
    status_code = 409
    code = 'ALREADY_MEMBER'


class StorageUnavailable(GuildQuestError):
    """
    Transient storage failure. The whole operation can be retried safely
    because review state is always recomputed from the rating ledger.
    """
    status_code = 503
    code = 'STORAGE_UNAVAILABLE'


class RatingConflict(StorageUnavailable):
    """Another rating landed on the same submission between read and write."""
    status_code = 409
    code = 'RATING_CONFLICT'

    def __init__(self, submission_id: str):
        super().__init__(f"Submission {submission_id} changed while rating, retry")
        self.submission_id = submission_id


class ConditionFailed(GuildQuestError):
    """
    A conditional write was refused by the store.

    index is the position of the refused operation in the write batch.
    """
    status_code = 409
    code = 'CONDITION_FAILED'

    def __init__(self, index: int, table_name: str):
        super().__init__(f"Condition failed on {table_name} (operation {index})")
        self.index = index
        self.table_name = table_name


class RewardApplicationFailed(GuildQuestError):
    """
    The submission was persisted as completed but the member's points were
    not updated. Requires reconciliation (see rewards.reconcile_rewards).
    """
    status_code = 500
    code = 'REWARD_APPLICATION_FAILED'

    def __init__(self, submission_id: str, member_id: str, points: int, reason: str = ''):
        message = f"Reward of {points} QP for submission {submission_id} not applied to member {member_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.submission_id = submission_id
        self.member_id = member_id
        self.points = points
