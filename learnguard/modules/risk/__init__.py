"""Risk Module - Learning risk models and detection.

Usage:
    from learnguard.modules.risk import RiskAnalyzer

    analyzer = RiskAnalyzer()
    risks = analyzer.analyze(snapshot, trends=report.trends)
"""

from learnguard.modules.risk.analyzer import RiskAnalyzer, attention_values, motivation_values
from learnguard.modules.risk.interface import (
    Direction,
    IndicatorRule,
    IRiskAnalyzer,
    LearningRisk,
    RiskIndicator,
    RiskModel,
)
from learnguard.modules.risk.registry import (
    RiskModelRegistry,
    build_default_models,
    build_default_registry,
)

__all__ = [
    # Interface types
    "Direction",
    "IndicatorRule",
    "IRiskAnalyzer",
    "LearningRisk",
    "RiskIndicator",
    "RiskModel",
    # Implementations
    "RiskAnalyzer",
    "RiskModelRegistry",
    "attention_values",
    "motivation_values",
    "build_default_models",
    "build_default_registry",
]
