import os

from .util import duration_to_seconds


class FrameworkConfig:
  """Framework settings, taken from OFFERLOOP_* environment variables."""

  class Error(ValueError): pass

  ENV_PREFIX = 'OFFERLOOP_'

  DEFAULT_NAME = 'Quota Framework'
  DEFAULT_EXECUTOR = './test_executor'
  DEFAULT_TOTAL_TASKS = 5
  DEFAULT_TASK_CPUS = '1'
  DEFAULT_TASK_MEM = '32'
  DEFAULT_OFFER_TIMEOUT = '1'

  @classmethod
  def get_env(cls, environ, key, default):
    return environ.get(cls.ENV_PREFIX + key, default)

  @classmethod
  def get_int(cls, environ, key, default):
    value = cls.get_env(environ, key, None)
    if value is None:
      return default
    try:
      return int(value)
    except ValueError:
      raise cls.Error('%s%s must be an integer, got %r' % (cls.ENV_PREFIX, key, value))

  @classmethod
  def from_environ(cls, environ=None):
    environ = os.environ if environ is None else environ
    return cls(
        name=cls.get_env(environ, 'FRAMEWORK_NAME', cls.DEFAULT_NAME),
        executor=cls.get_env(environ, 'EXECUTOR', cls.DEFAULT_EXECUTOR),
        total_tasks=cls.get_int(environ, 'TOTAL_TASKS', cls.DEFAULT_TOTAL_TASKS),
        task_cpus=cls.get_env(environ, 'TASK_CPUS', cls.DEFAULT_TASK_CPUS),
        task_mem=cls.get_env(environ, 'TASK_MEM', cls.DEFAULT_TASK_MEM),
        offer_timeout=cls.get_env(environ, 'OFFER_TIMEOUT', cls.DEFAULT_OFFER_TIMEOUT),
    )

  def __init__(self,
               name=DEFAULT_NAME,
               executor=DEFAULT_EXECUTOR,
               total_tasks=DEFAULT_TOTAL_TASKS,
               task_cpus=DEFAULT_TASK_CPUS,
               task_mem=DEFAULT_TASK_MEM,
               offer_timeout=DEFAULT_OFFER_TIMEOUT):
    if not isinstance(total_tasks, int) or isinstance(total_tasks, bool):
      raise self.Error('Total tasks must be an integer, got %r' % (total_tasks,))
    if total_tasks < 1:
      raise self.Error('Total tasks must be at least 1, got %d' % total_tasks)
    try:
      duration_to_seconds(offer_timeout)
    except ValueError as e:
      raise self.Error('Invalid offer timeout: %s' % e)
    self.name = name
    self.executor = executor
    self.total_tasks = total_tasks
    self.task_cpus = task_cpus
    self.task_mem = task_mem
    self.offer_timeout = offer_timeout

  @property
  def task_resources(self):
    return {'cpus': self.task_cpus, 'mem': self.task_mem}
