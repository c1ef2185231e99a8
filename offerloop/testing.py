import threading

from .api import SchedulerDriver
from .framework import QuotaScheduler
from .messages import DRIVER_RUNNING, DRIVER_STOPPED, SlaveOffer


def fake_offers(*slave_ids):
  return [SlaveOffer(slave_id, 'fake_host', {'cpus': '1', 'mem': '64'})
          for slave_id in slave_ids or ('fake_slave_id',)]


class MockDriver(SchedulerDriver):
  """Records the actions a scheduler takes without delivering them anywhere."""

  def __init__(self):
    self.status = DRIVER_RUNNING
    self.replies = []  # (offer_id, tasks, params)
    self.stop_calls = 0
    self.stop_event = threading.Event()

  def reply_to_offer(self, offer_id, tasks, params=None):
    self.replies.append((offer_id, list(tasks), dict(params or {})))
    return self.status

  replyToOffer = reply_to_offer

  def stop(self):
    self.stop_calls += 1
    self.status = DRIVER_STOPPED
    self.stop_event.set()
    return self.status

  @property
  def launched(self):
    return [task for _, tasks, _ in self.replies for task in tasks]


class ExceptionScheduler(QuotaScheduler):
  """A quota scheduler with a defect in its framework name query."""

  def get_framework_name(self, driver):
    names = ['TestException', 'Framework']
    return names[2]
