"""
Reconcile Rewards Handler.
Triggered by EventBridge scheduler to apply rewards for completed
submissions whose member update failed after the review resolved.
"""
from guildquest import events
from guildquest.errors import GuildQuestError
from guildquest.logging import logger
from guildquest.models import EventType
from guildquest.rewards import reconcile_rewards


def handler(event, context):
    """
    Scheduled handler; safe to run at any frequency since each reward is
    guarded by the submission's rewardedAt stamp.
    """
    logger.info("Running reward reconciliation...")

    try:
        result = reconcile_rewards()
    except GuildQuestError as e:
        logger.error(f"Reward reconciliation aborted: {e}")
        raise

    for submission_id in result['rewarded']:
        events.emit_change(EventType.REWARD_APPLIED, {'submissionId': submission_id})
    for failure in result['failed']:
        logger.error(f"Reward still pending for {failure['submissionId']}: {failure['reason']}")

    logger.info(
        f"Checked {result['checked']} completed submissions: "
        f"{len(result['rewarded'])} rewarded, {len(result['failed'])} failed"
    )

    return {
        'checked': result['checked'],
        'rewarded': len(result['rewarded']),
        'failed': len(result['failed'])
    }
