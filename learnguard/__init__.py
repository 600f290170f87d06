"""LearnGuard - learning risk prediction, interventions and path optimization."""

__version__ = "1.0.0"
