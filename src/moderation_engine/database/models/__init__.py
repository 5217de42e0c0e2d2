"""Data models for the moderation engine."""

from moderation_engine.database.models.appeal import AppealCreate
from moderation_engine.database.models.appeal import AppealUpdate
from moderation_engine.database.models.appeal import ModerationAppeal
from moderation_engine.database.models.analysis import AssistRecommendation
from moderation_engine.database.models.analysis import CategoryScores
from moderation_engine.database.models.analysis import ContentAnalysis
from moderation_engine.database.models.analysis import RecommendationType
from moderation_engine.database.models.base import SYSTEM_ACTOR
from moderation_engine.database.models.base import Actor
from moderation_engine.database.models.base import AppealStatus
from moderation_engine.database.models.base import BaseDBModel
from moderation_engine.database.models.base import ContentReference
from moderation_engine.database.models.base import ContentType
from moderation_engine.database.models.base import DecisionOutcome
from moderation_engine.database.models.base import FlagStatus
from moderation_engine.database.models.base import FlagTransition
from moderation_engine.database.models.base import HumanActor
from moderation_engine.database.models.base import SystemActor
from moderation_engine.database.models.decision import ModerationDecision
from moderation_engine.database.models.decision import ModerationDecisionCreate
from moderation_engine.database.models.flag import ModerationFlag
from moderation_engine.database.models.flag import ModerationFlagCreate

__all__ = [
    "SYSTEM_ACTOR",
    "Actor",
    "AppealCreate",
    "AppealStatus",
    "AppealUpdate",
    "AssistRecommendation",
    "BaseDBModel",
    "CategoryScores",
    "ContentAnalysis",
    "ContentReference",
    "ContentType",
    "DecisionOutcome",
    "FlagStatus",
    "FlagTransition",
    "HumanActor",
    "ModerationAppeal",
    "ModerationDecision",
    "ModerationDecisionCreate",
    "ModerationFlag",
    "ModerationFlagCreate",
    "RecommendationType",
    "SystemActor",
]
