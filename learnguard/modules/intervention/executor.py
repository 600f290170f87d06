"""Intervention execution tracking.

The executor does not perform a strategy's actions. It records that an
execution was requested and tracks reported progress, monitored metrics,
results and learner feedback.

Status transitions:
    planned -> active | cancelled
    active  -> completed | cancelled | failed
"""

from typing import Any
from uuid import UUID
import logging

from learnguard.modules.intervention.interface import (
    ExecutionProgress,
    InterventionExecution,
    MonitoredMetric,
    UserFeedback,
)
from learnguard.shared.datetime_utils import Clock, utc_now
from learnguard.shared.exceptions import (
    ExecutionNotFoundError,
    FeedbackAlreadyRecordedError,
    InvalidRatingError,
    InvalidStateError,
    InvalidTransitionError,
)
from learnguard.shared.models import ExecutionStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ExecutionStatus, frozenset[ExecutionStatus]] = {
    ExecutionStatus.PLANNED: frozenset({ExecutionStatus.ACTIVE, ExecutionStatus.CANCELLED}),
    ExecutionStatus.ACTIVE: frozenset(
        {ExecutionStatus.COMPLETED, ExecutionStatus.CANCELLED, ExecutionStatus.FAILED}
    ),
    ExecutionStatus.COMPLETED: frozenset(),
    ExecutionStatus.CANCELLED: frozenset(),
    ExecutionStatus.FAILED: frozenset(),
}

MIN_RATING = 1
MAX_RATING = 5


class InterventionExecutor:
    """In-memory store of intervention executions keyed by id."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._executions: dict[UUID, InterventionExecution] = {}

    # ===================
    # Creation
    # ===================

    def execute(self, strategy_id: UUID, user_id: UUID, total_actions: int = 0) -> InterventionExecution:
        """Create an execution that is already active.

        Args:
            strategy_id: Strategy being executed
            user_id: Learner it is executed for
            total_actions: Number of actions, when known

        Returns:
            The new active execution
        """
        execution = self._create(strategy_id, user_id, ExecutionStatus.ACTIVE, total_actions)
        logger.info(f"Intervention {execution.id} started for user {user_id}")
        return execution

    def plan(self, strategy_id: UUID, user_id: UUID, total_actions: int = 0) -> InterventionExecution:
        """Create an execution in planned status, to be started later."""
        execution = self._create(strategy_id, user_id, ExecutionStatus.PLANNED, total_actions)
        logger.info(f"Intervention {execution.id} planned for user {user_id}")
        return execution

    def _create(
        self,
        strategy_id: UUID,
        user_id: UUID,
        status: ExecutionStatus,
        total_actions: int,
    ) -> InterventionExecution:
        if total_actions < 0:
            raise ValueError(f"total_actions must be non-negative, got {total_actions}")
        execution = InterventionExecution(
            strategy_id=strategy_id,
            user_id=user_id,
            started_at=self._clock(),
            status=status,
            progress=ExecutionProgress(total_actions=total_actions),
        )
        self._executions[execution.id] = execution
        return execution

    # ===================
    # Transitions
    # ===================

    def start(self, execution_id: UUID) -> InterventionExecution:
        execution = self._transition(execution_id, ExecutionStatus.ACTIVE)
        execution.started_at = self._clock()
        return execution

    def complete(
        self, execution_id: UUID, results: dict[str, Any] | None = None
    ) -> InterventionExecution:
        execution = self._transition(execution_id, ExecutionStatus.COMPLETED)
        execution.results = dict(results or {})
        execution.progress.current_phase = "completed"
        execution.progress.next_milestone = None
        return execution

    def fail(
        self, execution_id: UUID, results: dict[str, Any] | None = None
    ) -> InterventionExecution:
        execution = self._transition(execution_id, ExecutionStatus.FAILED)
        execution.results = dict(results or {})
        execution.progress.next_milestone = None
        return execution

    def cancel(self, execution_id: UUID) -> InterventionExecution:
        execution = self._transition(execution_id, ExecutionStatus.CANCELLED)
        execution.progress.next_milestone = None
        return execution

    def _transition(self, execution_id: UUID, target: ExecutionStatus) -> InterventionExecution:
        execution = self.get(execution_id)
        if target not in ALLOWED_TRANSITIONS[execution.status]:
            raise InvalidTransitionError(execution_id, execution.status.value, target.value)

        previous = execution.status
        execution.status = target
        if target.is_terminal:
            execution.completed_at = self._clock()
        logger.info(f"Intervention {execution_id}: {previous.value} -> {target.value}")
        return execution

    # ===================
    # Tracking
    # ===================

    def update_progress(
        self,
        execution_id: UUID,
        completed_actions: int | None = None,
        total_actions: int | None = None,
        current_phase: str | None = None,
        next_milestone: str | None = None,
    ) -> InterventionExecution:
        """Record reported progress on an active execution.

        Raises:
            ExecutionNotFoundError: If the id is unknown
            InvalidStateError: If the execution is not active
            ValueError: If the counters are inconsistent
        """
        execution = self._require_status(execution_id, ExecutionStatus.ACTIVE, "update progress")
        progress = execution.progress

        total = progress.total_actions if total_actions is None else total_actions
        completed = progress.completed_actions if completed_actions is None else completed_actions
        if total < 0 or completed < 0:
            raise ValueError("Action counts must be non-negative")
        if total and completed > total:
            raise ValueError(f"completed_actions ({completed}) exceeds total_actions ({total})")

        progress.total_actions = total
        progress.completed_actions = completed
        if current_phase is not None:
            progress.current_phase = current_phase
        if next_milestone is not None:
            progress.next_milestone = next_milestone
        return execution

    def record_metric(
        self,
        execution_id: UUID,
        metric: str,
        baseline: float,
        current: float,
        target: float,
    ) -> MonitoredMetric:
        """Add or replace a monitored metric on a non-terminal execution."""
        execution = self.get(execution_id)
        if execution.status.is_terminal:
            raise InvalidStateError(
                f"Cannot record metrics on a {execution.status.value} execution",
                {"execution_id": str(execution_id), "status": execution.status.value},
            )

        entry = MonitoredMetric(metric=metric, baseline=baseline, current=current, target=target)
        execution.monitoring = [m for m in execution.monitoring if m.metric != metric]
        execution.monitoring.append(entry)
        return entry

    def record_feedback(
        self,
        execution_id: UUID,
        rating: int,
        comment: str | None = None,
        helpful: bool | None = None,
    ) -> InterventionExecution:
        """Store the learner's single post-completion feedback.

        Raises:
            ExecutionNotFoundError: If the id is unknown
            InvalidRatingError: If the rating is outside 1-5
            InvalidStateError: If the execution has not finished
            FeedbackAlreadyRecordedError: If feedback was already stored
        """
        if not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidRatingError("rating", rating)

        execution = self.get(execution_id)
        if not execution.status.is_terminal:
            raise InvalidStateError(
                "Feedback can only be recorded after the execution has finished",
                {"execution_id": str(execution_id), "status": execution.status.value},
            )
        if execution.user_feedback is not None:
            raise FeedbackAlreadyRecordedError(execution_id)

        execution.user_feedback = UserFeedback(
            rating=rating,
            comment=comment,
            helpful=helpful,
            submitted_at=self._clock(),
        )
        return execution

    # ===================
    # Queries
    # ===================

    def get(self, execution_id: UUID) -> InterventionExecution:
        execution = self._executions.get(execution_id)
        if execution is None:
            raise ExecutionNotFoundError(execution_id)
        return execution

    def list_for(
        self,
        user_id: UUID,
        status: ExecutionStatus | None = None,
    ) -> list[InterventionExecution]:
        return [
            e
            for e in self._executions.values()
            if e.user_id == user_id and (status is None or e.status is status)
        ]

    def active_for(self, user_id: UUID) -> list[InterventionExecution]:
        return self.list_for(user_id, ExecutionStatus.ACTIVE)

    def open_strategy_ids(self) -> set[UUID]:
        """Strategies behind executions that have not reached a terminal status."""
        return {e.strategy_id for e in self._executions.values() if not e.status.is_terminal}

    def __len__(self) -> int:
        return len(self._executions)

    def _require_status(
        self, execution_id: UUID, status: ExecutionStatus, action: str
    ) -> InterventionExecution:
        execution = self.get(execution_id)
        if execution.status is not status:
            raise InvalidStateError(
                f"Cannot {action} on a {execution.status.value} execution",
                {"execution_id": str(execution_id), "status": execution.status.value},
            )
        return execution
