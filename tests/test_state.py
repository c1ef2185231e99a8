from offerloop.messages import (
    TASK_FAILED,
    TASK_FINISHED,
    TASK_KILLED,
    TASK_LOST,
    TASK_RUNNING,
    TASK_STAGING,
    TaskDescription,
    TaskStatus,
)
from offerloop.state import FrameworkState, Phase, TaskLedger, TerminationPolicy

import pytest


def running_state(total_quota=5, launched=5):
  state = FrameworkState(total_quota)
  state.transition(Phase.REGISTERED)
  state.transition(Phase.RUNNING)
  ledger = TaskLedger()
  for task_id in range(launched):
    ledger.track(TaskDescription(task_id, 'fake_slave_id', 'task %d' % task_id))
    state.launched_count += 1
  return state, ledger


def test_initial_state():
  state = FrameworkState(5)
  assert state.phase == Phase.UNREGISTERED
  assert state.launched_count == 0
  assert state.finished_count == 0
  assert state.total_quota == 5


def test_quota_must_be_positive():
  with pytest.raises(ValueError):
    FrameworkState(0)


def test_phase_transitions():
  state = FrameworkState(1)
  with pytest.raises(FrameworkState.InvalidTransition):
    state.transition(Phase.RUNNING)
  state.transition(Phase.REGISTERED)
  state.transition(Phase.RUNNING)
  state.transition(Phase.STOPPED)
  with pytest.raises(FrameworkState.InvalidTransition):
    state.transition(Phase.REGISTERED)


def test_invariant_check():
  state = FrameworkState(1)
  state.check()
  state.launched_count = 2
  with pytest.raises(FrameworkState.InvariantViolation):
    state.check()


def test_tracked_tasks_start_staging():
  _, ledger = running_state(launched=1)
  assert ledger.state_of(0) == TASK_STAGING
  assert ledger.state_of(1) is None


def test_finished_counts_toward_completion():
  state, ledger = running_state()
  ledger.apply(state, TaskStatus(0, TASK_RUNNING))
  assert state.finished_count == 0
  ledger.apply(state, TaskStatus(0, TASK_FINISHED))
  assert state.finished_count == 1
  # straight from staging to finished
  ledger.apply(state, TaskStatus(1, TASK_FINISHED))
  assert state.finished_count == 2
  assert state.terminal_counts == {TASK_FINISHED: 2}


def test_unsuccessful_states_are_recorded_only():
  state, ledger = running_state()
  ledger.apply(state, TaskStatus(0, TASK_FAILED))
  ledger.apply(state, TaskStatus(1, TASK_KILLED))
  ledger.apply(state, TaskStatus(2, TASK_RUNNING))
  ledger.apply(state, TaskStatus(2, TASK_LOST))
  assert state.finished_count == 0
  assert state.launched_count == 5
  assert state.terminal_counts == {TASK_FAILED: 1, TASK_KILLED: 1, TASK_LOST: 1}
  assert ledger.state_of(0) == TASK_FAILED


def test_repeated_running_update():
  state, ledger = running_state()
  ledger.apply(state, TaskStatus(0, TASK_RUNNING))
  ledger.apply(state, TaskStatus(0, TASK_RUNNING))
  assert ledger.state_of(0) == TASK_RUNNING


@pytest.mark.parametrize('first, second', [
  (TASK_FINISHED, TASK_FINISHED),
  (TASK_FINISHED, TASK_RUNNING),
  (TASK_FAILED, TASK_FINISHED),
  (TASK_LOST, TASK_RUNNING),
])
def test_update_after_terminal_state(first, second):
  state, ledger = running_state()
  ledger.apply(state, TaskStatus(3, first))
  finished = state.finished_count
  with pytest.raises(TaskLedger.ProtocolViolation):
    ledger.apply(state, TaskStatus(3, second))
  assert ledger.state_of(3) == first
  assert state.finished_count == finished


def test_update_for_unknown_task():
  state, ledger = running_state(launched=2)
  with pytest.raises(TaskLedger.ProtocolViolation):
    ledger.apply(state, TaskStatus(7, TASK_FINISHED))
  assert state.finished_count == 0


def test_running_cannot_return_to_staging():
  state, ledger = running_state()
  ledger.apply(state, TaskStatus(0, TASK_RUNNING))
  with pytest.raises(TaskLedger.ProtocolViolation):
    ledger.apply(state, TaskStatus(0, TASK_STAGING))


def test_unknown_state():
  state, ledger = running_state()
  with pytest.raises(TaskLedger.ProtocolViolation):
    ledger.apply(state, TaskStatus(0, 42))


def test_task_tracked_twice():
  _, ledger = running_state(launched=1)
  with pytest.raises(TaskLedger.ProtocolViolation):
    ledger.track(TaskDescription(0, 'fake_slave_id', 'task 0'))


def test_termination_fires_once():
  state, ledger = running_state(total_quota=2, launched=2)
  policy = TerminationPolicy()
  assert not policy.should_stop(state)

  ledger.apply(state, TaskStatus(0, TASK_FINISHED))
  assert not policy.should_stop(state)

  ledger.apply(state, TaskStatus(1, TASK_FINISHED))
  assert policy.should_stop(state)
  assert state.phase == Phase.STOPPED

  assert not policy.should_stop(state)
  assert not policy.should_stop(state)


def test_termination_unreachable_after_failure():
  state, ledger = running_state(total_quota=2, launched=2)
  policy = TerminationPolicy()
  ledger.apply(state, TaskStatus(0, TASK_FAILED))
  ledger.apply(state, TaskStatus(1, TASK_FINISHED))
  assert not policy.should_stop(state)
  assert state.phase == Phase.RUNNING
