"""Service layer for the moderation engine."""

from moderation_engine.services.ai_assist_advisor import AIAssistAdvisor
from moderation_engine.services.appeal_processor import AppealProcessor
from moderation_engine.services.auto_moderation_policy import AutoModerationPolicy
from moderation_engine.services.content_analyzer import ContentAnalyzer
from moderation_engine.services.content_analyzer import LLMContentAnalyzer
from moderation_engine.services.flag_lifecycle import FlagLifecycle
from moderation_engine.services.moderation_service import ModerationService

__all__ = [
    "AIAssistAdvisor",
    "AppealProcessor",
    "AutoModerationPolicy",
    "ContentAnalyzer",
    "FlagLifecycle",
    "LLMContentAnalyzer",
    "ModerationService",
]
