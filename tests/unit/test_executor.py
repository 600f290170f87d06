"""Unit tests for InterventionExecutor."""

from uuid import uuid4

import pytest

from learnguard.modules.intervention import ALLOWED_TRANSITIONS, InterventionExecutor
from learnguard.shared.exceptions import (
    ExecutionNotFoundError,
    FeedbackAlreadyRecordedError,
    InvalidRatingError,
    InvalidStateError,
    InvalidTransitionError,
)
from learnguard.shared.models import ExecutionStatus


@pytest.fixture
def executor(clock):
    return InterventionExecutor(clock=clock)


@pytest.fixture
def active(executor, sample_user_id):
    return executor.execute(uuid4(), sample_user_id, total_actions=3)


class TestCreation:
    """Tests for execute and plan."""

    def test_execute_creates_active_execution(self, executor, clock, sample_user_id):
        strategy_id = uuid4()

        execution = executor.execute(strategy_id, sample_user_id, total_actions=2)

        assert execution.status == ExecutionStatus.ACTIVE
        assert execution.strategy_id == strategy_id
        assert execution.started_at == clock()
        assert execution.progress.total_actions == 2
        assert execution.progress.completed_actions == 0
        assert execution.progress.current_phase == "initialization"
        assert execution.progress.next_milestone == "action_execution"
        assert execution.monitoring == []
        assert execution.user_feedback is None
        assert executor.get(execution.id) is execution

    def test_plan_creates_planned_execution(self, executor, sample_user_id):
        execution = executor.plan(uuid4(), sample_user_id)
        assert execution.status == ExecutionStatus.PLANNED

    def test_negative_total_rejected(self, executor, sample_user_id):
        with pytest.raises(ValueError):
            executor.execute(uuid4(), sample_user_id, total_actions=-1)

    def test_unknown_id_raises(self, executor):
        with pytest.raises(ExecutionNotFoundError):
            executor.get(uuid4())


class TestTransitions:
    """Tests for status transitions."""

    def test_terminal_states_have_no_exits(self):
        for status in (ExecutionStatus.COMPLETED, ExecutionStatus.CANCELLED, ExecutionStatus.FAILED):
            assert ALLOWED_TRANSITIONS[status] == frozenset()

    def test_planned_then_started(self, executor, clock, sample_user_id):
        """Test that starting resets started_at."""
        execution = executor.plan(uuid4(), sample_user_id)
        clock.advance(hours=2)

        executor.start(execution.id)

        assert execution.status == ExecutionStatus.ACTIVE
        assert execution.started_at == clock()

    def test_complete(self, executor, active, clock):
        clock.advance(hours=5)

        executor.complete(active.id, {"improvement": 12})

        assert active.status == ExecutionStatus.COMPLETED
        assert active.completed_at == clock()
        assert active.results == {"improvement": 12}
        assert active.progress.current_phase == "completed"
        assert active.progress.next_milestone is None

    def test_fail(self, executor, active):
        executor.fail(active.id, {"reason": "learner inactive"})

        assert active.status == ExecutionStatus.FAILED
        assert active.results == {"reason": "learner inactive"}
        assert active.completed_at is not None

    def test_cancel_planned(self, executor, sample_user_id):
        execution = executor.plan(uuid4(), sample_user_id)
        executor.cancel(execution.id)
        assert execution.status == ExecutionStatus.CANCELLED

    def test_cannot_complete_planned(self, executor, sample_user_id):
        """Test that a planned execution must be started first."""
        execution = executor.plan(uuid4(), sample_user_id)

        with pytest.raises(InvalidTransitionError):
            executor.complete(execution.id)

    def test_cannot_leave_terminal_state(self, executor, active):
        executor.complete(active.id)

        with pytest.raises(InvalidTransitionError):
            executor.cancel(active.id)
        with pytest.raises(InvalidTransitionError):
            executor.start(active.id)

    def test_invalid_transition_is_invalid_state(self, executor, active):
        """Test that transition errors share the invalid-state base."""
        executor.cancel(active.id)
        with pytest.raises(InvalidStateError):
            executor.fail(active.id)


class TestTracking:
    """Tests for progress, metrics and feedback."""

    def test_update_progress(self, executor, active):
        executor.update_progress(active.id, completed_actions=2, current_phase="review")

        assert active.progress.completed_actions == 2
        assert active.progress.total_actions == 3
        assert active.progress.current_phase == "review"
        assert active.progress.next_milestone == "action_execution"

    def test_progress_cannot_exceed_total(self, executor, active):
        with pytest.raises(ValueError):
            executor.update_progress(active.id, completed_actions=4)

    def test_progress_without_known_total(self, executor, sample_user_id):
        """Test that a zero total accepts any completed count."""
        execution = executor.execute(uuid4(), sample_user_id)
        executor.update_progress(execution.id, completed_actions=7)
        assert execution.progress.completed_actions == 7

    def test_progress_requires_active(self, executor, sample_user_id):
        execution = executor.plan(uuid4(), sample_user_id)
        with pytest.raises(InvalidStateError):
            executor.update_progress(execution.id, completed_actions=1)

    def test_record_metric_replaces_by_name(self, executor, active):
        executor.record_metric(active.id, "srs_accuracy_rate", 55, 60, 80)
        entry = executor.record_metric(active.id, "srs_accuracy_rate", 55, 70, 80)

        assert active.monitoring == [entry]
        assert entry.improvement == 15

    def test_record_metric_on_planned(self, executor, sample_user_id):
        execution = executor.plan(uuid4(), sample_user_id)
        executor.record_metric(execution.id, "focus_effectiveness", 40, 40, 80)
        assert len(execution.monitoring) == 1

    def test_record_metric_on_terminal_raises(self, executor, active):
        executor.complete(active.id)
        with pytest.raises(InvalidStateError):
            executor.record_metric(active.id, "focus_effectiveness", 40, 50, 80)

    def test_record_feedback(self, executor, active, clock):
        executor.complete(active.id)

        executor.record_feedback(active.id, 4, comment="Helpful", helpful=True)

        assert active.user_feedback.rating == 4
        assert active.user_feedback.helpful is True
        assert active.user_feedback.submitted_at == clock()

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, executor, active, rating):
        """Test that the rating is checked before the status."""
        with pytest.raises(InvalidRatingError):
            executor.record_feedback(active.id, rating)

    def test_feedback_requires_terminal_status(self, executor, active):
        with pytest.raises(InvalidStateError):
            executor.record_feedback(active.id, 5)

    def test_feedback_recorded_once(self, executor, active):
        executor.cancel(active.id)
        executor.record_feedback(active.id, 2)

        with pytest.raises(FeedbackAlreadyRecordedError):
            executor.record_feedback(active.id, 3)


class TestQueries:
    """Tests for listing executions."""

    def test_list_and_active(self, executor, sample_user_id):
        first = executor.execute(uuid4(), sample_user_id)
        second = executor.execute(uuid4(), sample_user_id)
        executor.execute(uuid4(), uuid4())
        executor.complete(second.id)

        assert len(executor.list_for(sample_user_id)) == 2
        assert executor.active_for(sample_user_id) == [first]
        assert executor.list_for(sample_user_id, ExecutionStatus.COMPLETED) == [second]
        assert len(executor) == 3
