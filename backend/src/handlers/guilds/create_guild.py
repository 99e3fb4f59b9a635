"""
Create Guild Handler.
POST /guilds
Body: { "name": "...", "description": "...", "category": "...", "privacy": "public|private", "memberLimit": 50 }
"""
from guildquest import events, guilds, members
from guildquest.auth import get_user_sub, get_username
from guildquest.errors import GuildQuestError
from guildquest.logging import logger, log_event
from guildquest.models import EventType, GuildPrivacy
from guildquest.utils import error_response, format_response, parse_body


def handler(event, context):
    """The creator becomes the guild's admin."""
    log_event(event)

    member_id = get_user_sub(event)
    if not member_id:
        return format_response(401, {'message': 'Unauthorized'})

    body = parse_body(event)

    try:
        members.ensure_member(member_id, get_username(event))
        guild = guilds.create_guild(
            member_id,
            name=body.get('name'),
            description=body.get('description'),
            category=body.get('category'),
            privacy=body.get('privacy') or GuildPrivacy.PUBLIC,
            member_limit=body.get('memberLimit')
        )
    except GuildQuestError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating guild: {e}")
        return format_response(500, {'message': 'Internal Server Error'})

    events.emit_change(EventType.GUILD_CREATED, guild)
    logger.info(f"Guild {guild['guildId']} created by {member_id}")

    return format_response(201, {
        'message': 'Your new guild has been created successfully.',
        'guild': guild
    })
