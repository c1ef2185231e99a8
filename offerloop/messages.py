"""Values exchanged between the driver, the master and the scheduler."""

from collections import namedtuple


# Task states, numbered as in the Mesos protocol.
TASK_RUNNING = 1
TASK_FINISHED = 2
TASK_FAILED = 3
TASK_KILLED = 4
TASK_LOST = 5
TASK_STAGING = 6

TASK_STATE_NAMES = {
  TASK_RUNNING: 'TASK_RUNNING',
  TASK_FINISHED: 'TASK_FINISHED',
  TASK_FAILED: 'TASK_FAILED',
  TASK_KILLED: 'TASK_KILLED',
  TASK_LOST: 'TASK_LOST',
  TASK_STAGING: 'TASK_STAGING',
}

TERMINAL_STATES = frozenset([TASK_FINISHED, TASK_FAILED, TASK_KILLED, TASK_LOST])


def state_name(state):
  return TASK_STATE_NAMES.get(state, 'UNKNOWN(%s)' % state)


def is_terminal(state):
  return state in TERMINAL_STATES


# Driver statuses.
DRIVER_NOT_STARTED = 1
DRIVER_RUNNING = 2
DRIVER_ABORTED = 3
DRIVER_STOPPED = 4


class ExecutorInfo(namedtuple('ExecutorInfo', ('uri', 'data'))):
  __slots__ = ()

  def __new__(cls, uri, data=b''):
    return super().__new__(cls, uri, data)


class SlaveOffer(namedtuple('SlaveOffer', ('slave_id', 'host', 'params'))):
  """The resources of a single slave within an offer."""
  __slots__ = ()

  def __new__(cls, slave_id, host, params=None):
    return super().__new__(cls, slave_id, host, dict(params or {}))


class TaskDescription(namedtuple('TaskDescription',
    ('task_id', 'slave_id', 'name', 'params', 'data'))):
  __slots__ = ()

  def __new__(cls, task_id, slave_id, name, params=None, data=b''):
    return super().__new__(cls, task_id, slave_id, name, dict(params or {}), data)


class TaskStatus(namedtuple('TaskStatus', ('task_id', 'state', 'data'))):
  __slots__ = ()

  def __new__(cls, task_id, state, data=b''):
    return super().__new__(cls, task_id, state, data)

  def __str__(self):
    return 'task %s is in state %s' % (self.task_id, state_name(self.state))


class ReplyPolicy(namedtuple('ReplyPolicy', ('timeout', 'tasks'))):
  """The answer to one offer: the tasks to launch and the reply options."""
  __slots__ = ()

  @property
  def params(self):
    return {'timeout': self.timeout}
