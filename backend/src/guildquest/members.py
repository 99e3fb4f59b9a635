"""
Member profiles and the global leaderboard.
"""
from typing import Dict, List, Any
from . import store
from .config import config
from .errors import ConditionFailed, MemberNotFound, ValidationError
from .gamification import calculate_level, get_level_progress
from .models import LEADERBOARD_PARTITION, SubmissionStatus
from .utils import require_text, utc_now


def ensure_member(member_id: str, username: str = None, now: str = None) -> Dict[str, Any]:
    """
    Return the member's profile, creating it with 0 QP / level 1 if absent.
    """
    now = now or utc_now()
    member = {
        'memberId': member_id,
        'username': username or member_id,
        'questPoints': 0,
        'level': calculate_level(0),
        'board': LEADERBOARD_PARTITION,
        'createdAt': now,
        'updatedAt': now
    }
    try:
        store.write([store.insert_op(config.MEMBERS_TABLE, member, ['memberId'])])
    except ConditionFailed:
        return get_member(member_id)
    return member


def get_member(member_id: str) -> Dict[str, Any]:
    member = store.get(config.MEMBERS_TABLE, {'memberId': member_id}, consistent=False)
    if not member:
        raise MemberNotFound(member_id)
    return member


def update_profile(
    member_id: str,
    username: str = None,
    bio: str = None,
    avatar_url: str = None,
    now: str = None
) -> Dict[str, Any]:
    """
    Edit the member's public profile fields.

    Only the arguments that are not None are changed; an empty bio or
    avatar_url clears it. Points and level are owned by the reward
    dispatcher and never written here.

    Raises:
        ValidationError: nothing to change, or a field is malformed
        MemberNotFound: no profile exists for member_id
    """
    changes = {}
    if username is not None:
        changes['username'] = require_text(username, 'username', config.MAX_USERNAME_LENGTH)
    if bio is not None:
        if not isinstance(bio, str) or len(bio.strip()) > config.MAX_BIO_LENGTH:
            raise ValidationError(f"bio must be text of at most {config.MAX_BIO_LENGTH} characters")
        changes['bio'] = bio.strip()
    if avatar_url is not None:
        if not isinstance(avatar_url, str):
            raise ValidationError("avatarUrl must be a URL")
        avatar_url = avatar_url.strip()
        if avatar_url and not avatar_url.startswith(('https://', 'http://')):
            raise ValidationError("avatarUrl must be an http(s) URL")
        changes['avatarUrl'] = avatar_url
    if not changes:
        raise ValidationError("Provide at least one of username, bio or avatarUrl")

    changes['updatedAt'] = now or utc_now()
    try:
        store.write([store.update_op(
            config.MEMBERS_TABLE,
            {'memberId': member_id},
            changes,
            expected={'memberId': member_id}
        )])
    except ConditionFailed as e:
        raise MemberNotFound(member_id) from e

    return {**get_member(member_id), **changes}


def get_profile(member_id: str) -> Dict[str, Any]:
    """Profile page data: points, level progress, completed quests and guilds."""
    member = get_member(member_id)
    quest_points = int(member.get('questPoints', 0))

    completed = store.count(
        config.SUBMISSIONS_TABLE,
        'memberId',
        member_id,
        index_name='byMember',
        filters={'status': SubmissionStatus.COMPLETED}
    )
    memberships = store.query(
        config.GUILD_MEMBERS_TABLE, 'memberId', member_id, index_name='byMember'
    )

    return {
        'memberId': member_id,
        'username': member.get('username'),
        'bio': member.get('bio', ''),
        'avatarUrl': member.get('avatarUrl', ''),
        'questPoints': quest_points,
        'level': calculate_level(quest_points),
        'progress': get_level_progress(quest_points),
        'completedQuests': completed,
        'guilds': [{'guildId': m['guildId'], 'role': m.get('role')} for m in memberships]
    }


def leaderboard(limit: int = None) -> List[Dict[str, Any]]:
    """Top members by quest points, ranked from 1."""
    limit = limit or config.LEADERBOARD_LIMIT
    top = store.query(
        config.MEMBERS_TABLE,
        'board',
        LEADERBOARD_PARTITION,
        index_name='byPoints',
        limit=limit,
        scan_forward=False
    )
    return [
        {
            'rank': rank,
            'memberId': member['memberId'],
            'username': member.get('username'),
            'questPoints': int(member.get('questPoints', 0)),
            'level': calculate_level(int(member.get('questPoints', 0)))
        }
        for rank, member in enumerate(top, start=1)
    ]
