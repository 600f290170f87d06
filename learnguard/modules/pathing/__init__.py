"""Pathing Module - Learner profiles and optimized learning paths.

Usage:
    from learnguard.modules.pathing import LearningPathService

    service = LearningPathService(provider)
    profile = await service.analyze_learning_profile(user_id)
    path = await service.generate_optimized_path(user_id)
"""

from learnguard.modules.pathing.interface import (
    AdaptiveAdjustment,
    ILearningPathService,
    LearningInsight,
    LearningProfile,
    LearningRecommendation,
    Milestone,
    OptimizedLearningPath,
)
from learnguard.modules.pathing.optimizer import MILESTONES, PathOptimizer, determine_phase
from learnguard.modules.pathing.profile import LearningProfileBuilder
from learnguard.modules.pathing.service import LearningPathService

__all__ = [
    # Interface types
    "AdaptiveAdjustment",
    "ILearningPathService",
    "LearningInsight",
    "LearningProfile",
    "LearningRecommendation",
    "Milestone",
    "OptimizedLearningPath",
    # Engines
    "LearningProfileBuilder",
    "MILESTONES",
    "PathOptimizer",
    "determine_phase",
    # Service
    "LearningPathService",
]
