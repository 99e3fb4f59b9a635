"""
Gamification module - quest points, levels and level progress.
"""
from .config import config
from .errors import ValidationError
from .models import QuestDifficulty


def points_for_difficulty(difficulty: str) -> int:
    """
    Quest points awarded on completion, fixed by difficulty.

    Defaults: easy 10, medium 25, hard 50 (see config).
    """
    points = {
        QuestDifficulty.EASY: config.POINTS_EASY,
        QuestDifficulty.MEDIUM: config.POINTS_MEDIUM,
        QuestDifficulty.HARD: config.POINTS_HARD,
    }
    if difficulty not in points:
        raise ValidationError(
            f"Invalid difficulty '{difficulty}', expected one of {', '.join(QuestDifficulty.ALL)}"
        )
    return points[difficulty]


def calculate_level(quest_points: int) -> int:
    """
    Calculate member level from quest points.

    level = floor(quest_points / 100) + 1, so a new member starts at level 1.
    """
    if quest_points < 0:
        raise ValueError(f"quest_points must be non-negative, got {quest_points}")
    return quest_points // config.POINTS_PER_LEVEL + 1


def get_level_progress(quest_points: int) -> dict:
    """
    Get progress information toward the next level.

    Args:
        quest_points: Member's accumulated quest points

    Returns:
        Dict with progress info
    """
    per_level = config.POINTS_PER_LEVEL
    into_level = quest_points % per_level

    return {
        'level': calculate_level(quest_points),
        'quest_points': quest_points,
        'points_into_level': into_level,
        'points_to_next_level': per_level - into_level,
        'progress_pct': round(into_level / per_level * 100, 1)
    }
