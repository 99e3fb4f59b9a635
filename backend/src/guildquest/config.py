"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the guild quests backend.
"""
import os


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    MEMBERS_TABLE = os.environ.get('MEMBERS_TABLE', 'guildquest-members')
    GUILDS_TABLE = os.environ.get('GUILDS_TABLE', 'guildquest-guilds')
    GUILD_MEMBERS_TABLE = os.environ.get('GUILD_MEMBERS_TABLE', 'guildquest-group-members')
    QUESTS_TABLE = os.environ.get('QUESTS_TABLE', 'guildquest-quests')
    SUBMISSIONS_TABLE = os.environ.get('SUBMISSIONS_TABLE', 'guildquest-submissions')
    RATINGS_TABLE = os.environ.get('RATINGS_TABLE', 'guildquest-ratings')

    # S3 Buckets
    PROOFS_BUCKET = os.environ.get('PROOFS_BUCKET', '')
    UPLOAD_URL_EXPIRATION = int(os.environ.get('UPLOAD_URL_EXPIRATION', '900'))

    # EventBridge (live refresh channel consumed by the web client)
    EVENT_BUS_NAME = os.environ.get('EVENT_BUS_NAME', 'default')

    # Peer review thresholds
    APPROVAL_THRESHOLD = float(os.environ.get('APPROVAL_THRESHOLD', '80.0'))  # percent, inclusive
    QUORUM_RATIO = float(os.environ.get('QUORUM_RATIO', '0.5'))  # share of guild members
    ALLOW_SELF_RATING = _env_bool('ALLOW_SELF_RATING')

    # Quest points by difficulty
    POINTS_EASY = int(os.environ.get('POINTS_EASY', '10'))
    POINTS_MEDIUM = int(os.environ.get('POINTS_MEDIUM', '25'))
    POINTS_HARD = int(os.environ.get('POINTS_HARD', '50'))
    POINTS_PER_LEVEL = int(os.environ.get('POINTS_PER_LEVEL', '100'))

    # Guilds, proofs, leaderboard
    DEFAULT_MEMBER_LIMIT = int(os.environ.get('DEFAULT_MEMBER_LIMIT', '50'))
    MAX_PROOF_TEXT_LENGTH = int(os.environ.get('MAX_PROOF_TEXT_LENGTH', '5000'))
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '100'))

    # Profile fields
    MAX_USERNAME_LENGTH = int(os.environ.get('MAX_USERNAME_LENGTH', '50'))
    MAX_BIO_LENGTH = int(os.environ.get('MAX_BIO_LENGTH', '500'))


config = Config()
