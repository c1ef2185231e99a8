import logging

from .messages import ReplyPolicy, TaskDescription
from .state import Phase

log = logging.getLogger(__name__)


class OfferEvaluator:
  """Turns offers into at most one task per offer cycle until the quota is launched.

  Only the first slave in an offer is considered, and every task asks for the
  same fixed resources whatever the slave advertises.
  """

  class Error(Exception): pass
  class MalformedOffer(Error): pass

  DEFAULT_RESOURCES = {'cpus': '1', 'mem': '32'}
  DEFAULT_TIMEOUT = '1'

  def __init__(self, resources=None, timeout=DEFAULT_TIMEOUT, payload=b''):
    self.resources = dict(self.DEFAULT_RESOURCES if resources is None else resources)
    self.timeout = timeout
    self.payload = payload

  def evaluate(self, state, offers):
    if not offers:
      raise self.MalformedOffer('Offer carries no slaves')

    if state.phase == Phase.REGISTERED:
      state.transition(Phase.RUNNING)
    elif state.phase == Phase.UNREGISTERED:
      raise state.InvalidTransition('Received an offer before registration')

    tasks = []
    if state.launched_count < state.total_quota:
      offer = offers[0]
      task_id = state.launched_count
      log.info('Launching task %d on slave %s' % (task_id, offer.slave_id))
      tasks.append(TaskDescription(
          task_id,
          offer.slave_id,
          'task %d' % task_id,
          self.resources,
          self.payload,
      ))
      state.launched_count += 1

    state.check()
    return tasks, ReplyPolicy(self.timeout, tasks)
