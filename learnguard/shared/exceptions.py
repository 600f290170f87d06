"""Domain exceptions.

The API maps each family (not found, invalid state, validation, external
service, configuration, disabled feature) to one HTTP status, so new
exceptions should subclass the family they belong to.
"""

from typing import Any
from uuid import UUID


class LearnGuardException(Exception):
    """Root of the domain exception hierarchy.

    Attributes:
        message: Human-readable description
        details: Structured context, safe to return to API clients
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


# ===================
# Not found
# ===================

class ResourceNotFoundError(LearnGuardException):
    def __init__(self, resource_type: str, resource_id: UUID | str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class ExecutionNotFoundError(ResourceNotFoundError):
    def __init__(self, execution_id: UUID) -> None:
        super().__init__("InterventionExecution", execution_id)


class AlertNotFoundError(ResourceNotFoundError):
    """The alert id is unknown, or the alert has been swept after expiry."""

    def __init__(self, alert_id: UUID) -> None:
        super().__init__("PredictiveAlert", alert_id)


# ===================
# Invalid state
# ===================

class InvalidStateError(LearnGuardException):
    """The operation is not allowed in the resource's current status."""


class InvalidTransitionError(InvalidStateError):
    """An execution was asked to move to a status it cannot reach from its current one."""

    def __init__(self, execution_id: UUID, current_status: str, target_status: str) -> None:
        super().__init__(
            f"Cannot move execution from '{current_status}' to '{target_status}'",
            {
                "execution_id": str(execution_id),
                "status": current_status,
                "target_status": target_status,
            },
        )


class FeedbackAlreadyRecordedError(InvalidStateError):
    def __init__(self, execution_id: UUID) -> None:
        super().__init__(
            "Feedback has already been recorded for this execution",
            {"execution_id": str(execution_id)},
        )


# ===================
# Validation
# ===================

class ValidationError(LearnGuardException):
    """A caller-supplied value is out of its domain."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"Invalid {field}: {message}", {"field": field})


class InvalidRatingError(ValidationError):
    def __init__(self, field: str, rating: int) -> None:
        super().__init__(field, f"rating must be between 1 and 5, got {rating}")


class InvalidTimeRangeError(ValidationError):
    def __init__(self, start: str, end: str) -> None:
        super().__init__("time_range", f"end ({end}) must be after start ({start})")


# ===================
# Collaborators
# ===================

class ExternalServiceError(LearnGuardException):
    """A collaborator outside this process failed."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service} failed: {message}", {"service": service})


class StatsProviderError(ExternalServiceError):
    """The stats aggregator could not supply a snapshot or the learner list."""

    def __init__(self, message: str) -> None:
        super().__init__("StatsProvider", message)


# ===================
# Configuration
# ===================

class ConfigurationError(LearnGuardException):
    """Static configuration (risk models, strategy templates) is inconsistent."""


class InvalidRiskModelError(ConfigurationError):
    def __init__(self, risk_type: str, reason: str) -> None:
        super().__init__(
            f"Invalid risk model '{risk_type}': {reason}",
            {"risk_type": risk_type},
        )


# ===================
# Feature flags
# ===================

class FeatureDisabledError(LearnGuardException):
    """An operation was requested that its feature flag switches off."""

    def __init__(self, feature: str) -> None:
        super().__init__(
            f"Feature '{feature}' is not enabled. Set FF_{feature.upper()}=true to enable.",
            {"flag": feature},
        )
