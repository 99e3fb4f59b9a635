"""
Quests and proof submissions.

Quest masters (and guild admins) create quests; any guild member can
submit proof for an active quest. A new submission starts pending with
zero counts and a snapshot of the quest's points, which is what the
member earns if peers approve it.
"""
import uuid
from datetime import date
from typing import Dict, List, Any
from . import guilds, store
from .config import config
from .errors import ConditionFailed, PermissionDenied, QuestNotFound, ValidationError
from .gamification import points_for_difficulty
from .models import GuildRole, QuestDifficulty, QuestStatus, SubmissionStatus
from .s3_utils import is_allowed_content_type, is_proof_key
from .utils import require_text, utc_now


def require_quest_manager(guild_id: str, member_id: str) -> str:
    role = guilds.get_member_role(guild_id, member_id)
    if role not in GuildRole.QUEST_MANAGERS:
        raise PermissionDenied(f"Only quest masters can manage quests in guild {guild_id}")
    return role


def require_guild_member(guild_id: str, member_id: str) -> str:
    role = guilds.get_member_role(guild_id, member_id)
    if role is None:
        raise PermissionDenied(f"Member {member_id} does not belong to guild {guild_id}")
    return role


def _validate_deadline(deadline: str) -> str:
    if not deadline:
        return None
    try:
        return date.fromisoformat(deadline[:10]).isoformat()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid deadline '{deadline}', expected YYYY-MM-DD")


def get_quest(quest_id: str) -> Dict[str, Any]:
    quest = store.get(config.QUESTS_TABLE, {'questId': quest_id})
    if not quest:
        raise QuestNotFound(quest_id)
    return quest


def create_quest(
    guild_id: str,
    creator_id: str,
    title: str,
    description: str,
    difficulty: str = QuestDifficulty.MEDIUM,
    deadline: str = None,
    now: str = None
) -> Dict[str, Any]:
    """Create an active quest; points are fixed by difficulty."""
    guilds.get_guild(guild_id)
    require_quest_manager(guild_id, creator_id)

    quest = {
        'questId': str(uuid.uuid4()),
        'guildId': guild_id,
        'createdBy': creator_id,
        'title': require_text(title, 'title', 200),
        'description': require_text(description, 'description', 2000),
        'difficulty': difficulty,
        'points': points_for_difficulty(difficulty),
        'status': QuestStatus.ACTIVE,
        'createdAt': now or utc_now()
    }
    deadline = _validate_deadline(deadline)
    if deadline:
        quest['deadline'] = deadline

    store.write([store.insert_op(config.QUESTS_TABLE, quest, ['questId'])])
    return quest


def archive_quest(quest_id: str, member_id: str, now: str = None) -> Dict[str, Any]:
    """Archive an active quest. Existing submissions keep being reviewed."""
    quest = get_quest(quest_id)
    require_quest_manager(quest['guildId'], member_id)

    changes = {'status': QuestStatus.ARCHIVED, 'archivedAt': now or utc_now()}
    try:
        store.write([store.update_op(
            config.QUESTS_TABLE,
            {'questId': quest_id},
            changes,
            expected={'status': QuestStatus.ACTIVE}
        )])
    except ConditionFailed as e:
        raise ValidationError(f"Quest {quest_id} is already archived") from e
    return {**quest, **changes}


def list_active_quests(guild_id: str) -> List[Dict[str, Any]]:
    """Active quests of a guild, newest first."""
    quests = store.query(
        config.QUESTS_TABLE,
        'guildId',
        guild_id,
        index_name='byGuild',
        filters={'status': QuestStatus.ACTIVE}
    )
    return sorted(quests, key=lambda q: q.get('createdAt', ''), reverse=True)


def submit_proof(
    quest_id: str,
    member_id: str,
    proof_text: str = None,
    proof_file_key: str = None,
    proof_file_type: str = None,
    now: str = None
) -> Dict[str, Any]:
    """
    Submit proof of completing a quest for peer review.

    At least one of proof_text / proof_file_key is required. File keys
    must come from create_proof_upload for the same member.
    """
    proof_text = proof_text.strip() if isinstance(proof_text, str) else None
    if not proof_text and not proof_file_key:
        raise ValidationError("Please provide proof text or upload a file")
    if proof_text and len(proof_text) > config.MAX_PROOF_TEXT_LENGTH:
        raise ValidationError(f"Proof text must be at most {config.MAX_PROOF_TEXT_LENGTH} characters")
    if proof_file_key:
        if not is_proof_key(proof_file_key, member_id):
            raise ValidationError("Invalid proof file reference")
        if not is_allowed_content_type(proof_file_type):
            raise ValidationError(f"Unsupported proof file type: {proof_file_type}")

    quest = get_quest(quest_id)
    if quest.get('status') != QuestStatus.ACTIVE:
        raise ValidationError(f"Quest {quest_id} is not active")
    require_guild_member(quest['guildId'], member_id)

    submission = {
        'submissionId': str(uuid.uuid4()),
        'questId': quest_id,
        'guildId': quest['guildId'],
        'memberId': member_id,
        'status': SubmissionStatus.PENDING,
        'approvalCount': 0,
        'rejectionCount': 0,
        'ratingCount': 0,
        'rewardPoints': int(quest['points']),
        'submittedAt': now or utc_now()
    }
    if proof_text:
        submission['proofText'] = proof_text
    if proof_file_key:
        submission['proofFileKey'] = proof_file_key
        submission['proofFileType'] = proof_file_type

    store.write([store.insert_op(config.SUBMISSIONS_TABLE, submission, ['submissionId'])])
    return submission


def list_submissions(quest_id: str) -> List[Dict[str, Any]]:
    """All submissions for a quest, oldest first."""
    submissions = store.query(config.SUBMISSIONS_TABLE, 'questId', quest_id, index_name='byQuest')
    return sorted(submissions, key=lambda s: s.get('submittedAt', ''))
