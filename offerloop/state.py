import logging

from .messages import (
    TASK_FINISHED,
    TASK_RUNNING,
    TASK_STAGING,
    is_terminal,
    state_name,
)

log = logging.getLogger(__name__)


class Phase:
  UNREGISTERED = 'UNREGISTERED'
  REGISTERED = 'REGISTERED'
  RUNNING = 'RUNNING'
  STOPPED = 'STOPPED'

  TRANSITIONS = {
    UNREGISTERED: REGISTERED,
    REGISTERED: RUNNING,
    RUNNING: STOPPED,
  }


class FrameworkState:
  """Task counters and lifecycle phase of one framework instance."""

  class Error(Exception): pass
  class InvalidTransition(Error): pass
  class InvariantViolation(Error): pass

  def __init__(self, total_quota):
    if total_quota < 1:
      raise ValueError('Task quota must be at least 1, got %r' % total_quota)
    self.total_quota = total_quota
    self.launched_count = 0
    self.finished_count = 0
    self.phase = Phase.UNREGISTERED
    self.framework_id = None
    self.terminal_counts = {}  # terminal state => count, FINISHED included

  def transition(self, phase):
    if Phase.TRANSITIONS.get(self.phase) != phase:
      raise self.InvalidTransition('Cannot move from %s to %s' % (self.phase, phase))
    log.info('Framework phase %s -> %s' % (self.phase, phase))
    self.phase = phase

  def check(self):
    if not 0 <= self.finished_count <= self.launched_count <= self.total_quota:
      raise self.InvariantViolation(
          'Expected finished (%d) <= launched (%d) <= quota (%d)' % (
              self.finished_count, self.launched_count, self.total_quota))

  def __repr__(self):
    return 'FrameworkState(phase=%s, launched=%d, finished=%d, quota=%d)' % (
        self.phase, self.launched_count, self.finished_count, self.total_quota)


class TaskLedger:
  """Applies status updates to a FrameworkState.

  Tasks start out staging once launched and may only move forward:
  STAGING -> RUNNING -> {FINISHED, FAILED, KILLED, LOST}.  Terminal tasks are
  never revisited, and nothing is relaunched.
  """

  class Error(Exception): pass
  class ProtocolViolation(Error): pass

  def __init__(self):
    self.tasks = {}  # task_id => state

  def track(self, task):
    if task.task_id in self.tasks:
      raise self.ProtocolViolation('Task %s launched twice' % task.task_id)
    self.tasks[task.task_id] = TASK_STAGING

  def state_of(self, task_id):
    return self.tasks.get(task_id)

  def _validate(self, status):
    current = self.tasks.get(status.task_id)
    if current is None:
      raise self.ProtocolViolation('Status update for unknown task %s' % status.task_id)
    if is_terminal(current):
      raise self.ProtocolViolation('Task %s already terminal in %s, got %s' % (
          status.task_id, state_name(current), state_name(status.state)))
    if status.state == TASK_STAGING and current != TASK_STAGING:
      raise self.ProtocolViolation('Task %s cannot return to TASK_STAGING from %s' % (
          status.task_id, state_name(current)))
    if status.state not in (TASK_STAGING, TASK_RUNNING) and not is_terminal(status.state):
      raise self.ProtocolViolation('Task %s reported unknown state %r' % (
          status.task_id, status.state))

  def apply(self, state, status):
    self._validate(status)
    self.tasks[status.task_id] = status.state

    if is_terminal(status.state):
      state.terminal_counts[status.state] = state.terminal_counts.get(status.state, 0) + 1
      if status.state == TASK_FINISHED:
        state.finished_count += 1
        log.info('Finished tasks: %d' % state.finished_count)
      else:
        log.warning('Task %s ended in %s and will not be retried' % (
            status.task_id, state_name(status.state)))

    state.check()
    return state


class TerminationPolicy:
  """Signals shutdown once, when every task in the quota has finished."""

  def __init__(self):
    self.fired = False

  def should_stop(self, state):
    if self.fired or state.finished_count != state.total_quota:
      return False
    self.fired = True
    state.transition(Phase.STOPPED)
    return True
