from .calculate_streak import StreakCalculator
from .check_achievements import RULES, AchievementEvaluator, AchievementRule
from .health_score import HealthScoreService
from .log_activity import ActivityLogger
from .predict_weight import TrajectoryPredictor
from .record_weight import RecordWeightInput, record_weight
from .suggestions import SuggestionService, sort_by_priority

__all__ = [
    "RULES",
    "AchievementEvaluator",
    "AchievementRule",
    "ActivityLogger",
    "HealthScoreService",
    "RecordWeightInput",
    "StreakCalculator",
    "SuggestionService",
    "TrajectoryPredictor",
    "record_weight",
    "sort_by_priority",
]
