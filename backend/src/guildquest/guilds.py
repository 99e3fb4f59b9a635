"""
Guilds and guild membership.
"""
import uuid
from typing import Dict, List, Any, Optional
from . import store
from .config import config
from .errors import AlreadyMember, ConditionFailed, GuildFull, GuildNotFound, ValidationError
from .gamification import calculate_level
from .models import GuildPrivacy, GuildRole
from .utils import require_text, utc_now

MEMBERSHIP_KEY = ('guildId', 'memberId')


def get_guild(guild_id: str) -> Dict[str, Any]:
    guild = store.get(config.GUILDS_TABLE, {'guildId': guild_id})
    if not guild:
        raise GuildNotFound(guild_id)
    return guild


def guild_member_count(guild_id: str) -> int:
    """Number of members in a guild (drives the review quorum)."""
    return store.count(config.GUILD_MEMBERS_TABLE, 'guildId', guild_id)


def get_member_role(guild_id: str, member_id: str) -> Optional[str]:
    """The member's role in the guild, or None if they are not a member."""
    membership = store.get(config.GUILD_MEMBERS_TABLE, {'guildId': guild_id, 'memberId': member_id})
    if not membership:
        return None
    return membership.get('role') or GuildRole.MEMBER


def _membership_item(guild_id: str, member_id: str, role: str, now: str) -> Dict[str, Any]:
    return {
        'guildId': guild_id,
        'memberId': member_id,
        'role': role,
        'joinedAt': now
    }


def create_guild(
    creator_id: str,
    name: str,
    description: str = None,
    category: str = None,
    privacy: str = GuildPrivacy.PUBLIC,
    member_limit: int = None,
    now: str = None
) -> Dict[str, Any]:
    """
    Create a guild; the creator joins it as admin in the same transaction.
    """
    name = require_text(name, 'name', 100)
    if privacy not in (GuildPrivacy.PUBLIC, GuildPrivacy.PRIVATE):
        raise ValidationError(f"Invalid privacy '{privacy}'")
    member_limit = config.DEFAULT_MEMBER_LIMIT if member_limit is None else member_limit
    if not isinstance(member_limit, int) or isinstance(member_limit, bool) or member_limit < 1:
        raise ValidationError("memberLimit must be a positive integer")

    now = now or utc_now()
    guild = {
        'guildId': str(uuid.uuid4()),
        'name': name,
        'description': description or '',
        'category': category or '',
        'privacy': privacy,
        'memberLimit': member_limit,
        'createdBy': creator_id,
        'createdAt': now
    }

    store.write([
        store.insert_op(config.GUILDS_TABLE, guild, ['guildId']),
        store.insert_op(
            config.GUILD_MEMBERS_TABLE,
            _membership_item(guild['guildId'], creator_id, GuildRole.ADMIN, now),
            MEMBERSHIP_KEY
        ),
    ])
    return guild


def join_guild(guild_id: str, member_id: str, now: str = None) -> Dict[str, Any]:
    """
    Add a member to a guild with the plain member role.

    Raises:
        GuildNotFound, GuildFull, AlreadyMember
    """
    guild = get_guild(guild_id)
    limit = int(guild.get('memberLimit', config.DEFAULT_MEMBER_LIMIT))
    if guild_member_count(guild_id) >= limit:
        raise GuildFull(f"Guild {guild_id} is full ({limit} members)")

    membership = _membership_item(guild_id, member_id, GuildRole.MEMBER, now or utc_now())
    try:
        store.write([store.insert_op(config.GUILD_MEMBERS_TABLE, membership, MEMBERSHIP_KEY)])
    except ConditionFailed as e:
        raise AlreadyMember(f"Member {member_id} already belongs to guild {guild_id}") from e
    return membership


def get_guild_detail(guild_id: str, caller_id: str) -> Dict[str, Any]:
    """
    Guild page data: the guild, its roster and the caller's own role.

    Each roster entry joins the membership with the member's profile
    (username, quest points, level). Memberships whose profile is missing
    are listed with 0 QP / level 1.
    """
    guild = get_guild(guild_id)
    memberships = store.query(config.GUILD_MEMBERS_TABLE, 'guildId', guild_id)

    roster = []
    for membership in sorted(memberships, key=lambda m: m.get('joinedAt', '')):
        member_id = membership['memberId']
        profile = store.get(config.MEMBERS_TABLE, {'memberId': member_id}, consistent=False) or {}
        quest_points = int(profile.get('questPoints', 0))
        roster.append({
            'memberId': member_id,
            'role': membership.get('role') or GuildRole.MEMBER,
            'joinedAt': membership.get('joinedAt'),
            'username': profile.get('username') or member_id,
            'questPoints': quest_points,
            'level': calculate_level(quest_points)
        })

    your_role = next((m['role'] for m in roster if m['memberId'] == caller_id), None)

    return {
        **guild,
        'memberCount': len(roster),
        'members': roster,
        'yourRole': your_role,
        'isFounder': guild.get('createdBy') == caller_id
    }


def list_guilds_for(member_id: str) -> Dict[str, List[Dict[str, Any]]]:
    """
    All guilds split into the member's own and the ones they can join,
    each with its current member count.
    """
    memberships = store.query(
        config.GUILD_MEMBERS_TABLE, 'memberId', member_id, index_name='byMember'
    )
    my_guild_ids = {m['guildId'] for m in memberships}

    mine, others = [], []
    for guild in store.scan(config.GUILDS_TABLE):
        entry = {**guild, 'memberCount': guild_member_count(guild['guildId'])}
        if guild['guildId'] in my_guild_ids:
            mine.append(entry)
        elif guild.get('privacy', GuildPrivacy.PUBLIC) == GuildPrivacy.PUBLIC:
            others.append(entry)

    return {'myGuilds': mine, 'otherGuilds': others}
