import logging
import os

from .api import Scheduler
from .config import FrameworkConfig
from .messages import ExecutorInfo
from .policy import OfferEvaluator
from .state import FrameworkState, Phase, TaskLedger, TerminationPolicy

log = logging.getLogger(__name__)


class BootstrapError(Exception):
  """Unrecoverable failure while the driver bootstraps the framework."""


def resolve_executor(path):
  """Resolve the executor artifact to a canonical path, raising BootstrapError if absent."""
  try:
    resolved = os.path.realpath(path)
  except (OSError, TypeError, ValueError) as e:
    raise BootstrapError('Could not resolve executor %r: %s' % (path, e))
  if not os.path.exists(resolved):
    raise BootstrapError('Executor %s does not exist' % resolved)
  return resolved


class ErrorHandler:
  """Records error notifications.  None of them are fatal to the scheduler."""

  def __init__(self):
    self.errors = []  # (code, message)

  def handle(self, code, message):
    log.warning('Error: %s (code %s)' % (message, code))
    self.errors.append((code, message))

  def report(self, exception):
    log.error('Protocol violation: %s' % exception)
    self.errors.append((None, str(exception)))


class QuotaScheduler(Scheduler):
  """Runs a fixed number of tasks, one per offer, and stops once they have all finished."""

  def __init__(self, config=None):
    self.config = config or FrameworkConfig()
    self.state = FrameworkState(self.config.total_tasks)
    self.evaluator = OfferEvaluator(
        resources=self.config.task_resources,
        timeout=self.config.offer_timeout,
    )
    self.ledger = TaskLedger()
    self.termination = TerminationPolicy()
    self.error_handler = ErrorHandler()

  def get_framework_name(self, driver):
    return self.config.name

  def get_executor_info(self, driver):
    return ExecutorInfo(resolve_executor(self.config.executor), b'')

  def registered(self, driver, framework_id):
    log.info('Registered! FID = %s' % framework_id)
    self.state.framework_id = framework_id
    self.state.transition(Phase.REGISTERED)

  def resource_offer(self, driver, offer_id, offers):
    log.info('Got offer %s' % offer_id)
    tasks, reply = self.evaluator.evaluate(self.state, offers)
    for task in tasks:
      self.ledger.track(task)
    driver.reply_to_offer(offer_id, tasks, reply.params)

  def status_update(self, driver, status):
    log.info('Status update: %s' % status)
    try:
      self.ledger.apply(self.state, status)
    except TaskLedger.ProtocolViolation as e:
      self.error_handler.report(e)
      return
    if self.termination.should_stop(self.state):
      log.info('All %d tasks finished, stopping.' % self.state.total_quota)
      driver.stop()

  def error(self, driver, code, message):
    self.error_handler.handle(code, message)
