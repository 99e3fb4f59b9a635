"""
Data models and status constants for the guild quests backend.
Based on the submission lifecycle: Submitted (pending) → Rated by peers → Completed/Rejected → Rewarded
"""


class SubmissionStatus:
    """Submission review statuses. Terminal statuses never change again."""
    PENDING = 'pending'
    COMPLETED = 'completed'
    REJECTED = 'rejected'

    TERMINAL = (COMPLETED, REJECTED)


class Verdict:
    """A rater's verdict on a submission."""
    APPROVED = 'approved'
    REJECTED = 'rejected'

    ALL = (APPROVED, REJECTED)


class QuestStatus:
    """Quest lifecycle statuses."""
    ACTIVE = 'active'
    ARCHIVED = 'archived'


class QuestDifficulty:
    """Quest difficulty levels."""
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'

    ALL = (EASY, MEDIUM, HARD)


class GuildRole:
    """Guild-scoped member roles."""
    ADMIN = 'admin'
    QUEST_MASTER = 'quest_master'
    MEMBER = 'member'

    # Roles allowed to create and archive quests
    QUEST_MANAGERS = (ADMIN, QUEST_MASTER)


class GuildPrivacy:
    """Guild visibility."""
    PUBLIC = 'public'
    PRIVATE = 'private'


class EventType:
    """EventBridge detail types published for live UI refresh."""
    GUILD_CREATED = 'GuildCreated'
    GUILD_JOINED = 'GuildJoined'
    QUEST_CREATED = 'QuestCreated'
    QUEST_ARCHIVED = 'QuestArchived'
    SUBMISSION_CREATED = 'SubmissionCreated'
    SUBMISSION_RATED = 'SubmissionRated'
    SUBMISSION_REVIEWED = 'SubmissionReviewed'
    REWARD_APPLIED = 'RewardApplied'
    PROFILE_UPDATED = 'ProfileUpdated'


# Partition value shared by every member item so the byPoints GSI can rank them
LEADERBOARD_PARTITION = 'global'
