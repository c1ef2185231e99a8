import itertools
import logging
import socket
import threading
import time
import uuid

from .messages import TASK_FINISHED, TASK_RUNNING, SlaveOffer, TaskStatus
from .util import duration_to_seconds, unique_suffix

log = logging.getLogger(__name__)


def finish_task(task):
  """Executor behaviour for local slaves: every task runs and then finishes."""
  return (TASK_RUNNING, TASK_FINISHED)


class LocalSlave:
  DEFAULT_RESOURCES = {'cpus': '4', 'mem': '1024'}

  def __init__(self, slave_id, host=None, resources=None):
    self.slave_id = slave_id
    self.host = host or socket.gethostname()
    self.resources = dict(self.DEFAULT_RESOURCES if resources is None else resources)

  def offer(self):
    return SlaveOffer(self.slave_id, self.host, self.resources)

  def __repr__(self):
    return 'LocalSlave(%s@%s)' % (self.slave_id, self.host)


class LocalMaster:
  """An in-process master that offers its slaves to a single framework.

  Slaves are offered periodically while the framework is registered.  A slave
  is not offered again while an offer containing it is outstanding, and slaves
  left unused by a reply are refused for the reply's ``timeout``.  Launched
  tasks report the states produced by ``executor(task)``.
  """

  DEFAULT_OFFER_INTERVAL = 0.05

  @classmethod
  def with_slaves(cls, count, **kw):
    return cls([LocalSlave('slave-%d' % index) for index in range(count)], **kw)

  def __init__(self,
               slaves,
               offer_interval=DEFAULT_OFFER_INTERVAL,
               executor=finish_task,
               auto_offer=True,
               clock=time):
    self.slaves = dict((slave.slave_id, slave) for slave in slaves)
    self.offer_interval = offer_interval
    self.executor = executor
    self.auto_offer = auto_offer
    self.clock = clock
    self.name = unique_suffix('master')

    self.lock = threading.RLock()
    self.framework = None
    self.framework_id = None
    self.frameworks = {}  # framework_id => (name, executor_info)
    self.outstanding = {}  # offer_id => set of slave ids
    self.refused_until = {}  # slave_id => clock time
    self.launched = []
    self.replies = []  # (offer_id, tasks, params)

    # events
    self.register_event = threading.Event()
    self.reply_event = threading.Event()
    self.unregister_event = threading.Event()

    self._offer_ids = itertools.count()
    self._stopped = threading.Event()
    self._offer_thread = None

  def __str__(self):
    return self.name

  def register(self, framework, name, executor_info):
    framework_id = uuid.uuid4().hex
    with self.lock:
      self.frameworks[framework_id] = (name, executor_info)
      self.framework = framework
      self.framework_id = framework_id
    log.info('Registered framework %r as %s' % (name, framework_id))
    framework.dispatch('registered', framework_id)
    self.register_event.set()
    if self.auto_offer:
      self._start_offer_loop()

  def unregister(self, framework_id):
    log.info('Framework %s unregistered' % framework_id)
    with self.lock:
      self.frameworks.pop(framework_id, None)
      if framework_id == self.framework_id:
        self.framework = None
    self._stopped.set()
    self.unregister_event.set()

  def offer(self, slave_ids=None):
    """Offer the available slaves to the framework, returning the offer id or None."""
    with self.lock:
      framework = self.framework
      if framework is None:
        return None
      now = self.clock.time()
      busy = set()
      for offered in self.outstanding.values():
        busy.update(offered)
      candidates = sorted(self.slaves) if slave_ids is None else slave_ids
      available = [slave_id for slave_id in candidates
          if slave_id not in busy and self.refused_until.get(slave_id, 0) <= now]
      if not available:
        return None
      offer_id = 'offer-%d' % next(self._offer_ids)
      self.outstanding[offer_id] = set(available)
      offers = [self.slaves[slave_id].offer() for slave_id in available]
    log.debug('Sending offer %s for %s' % (offer_id, ', '.join(available)))
    framework.dispatch('resource_offer', offer_id, offers)
    return offer_id

  def reply_to_offer(self, framework_id, offer_id, tasks, params):
    try:
      timeout = duration_to_seconds(params.get('timeout', '0'))
    except ValueError as e:
      log.warning('Ignoring reply timeout for offer %s: %s' % (offer_id, e))
      timeout = 0

    with self.lock:
      self.replies.append((offer_id, list(tasks), dict(params)))
      offered = self.outstanding.pop(offer_id, set())
      used = set(task.slave_id for task in tasks)
      for slave_id in offered - used:
        self.refused_until[slave_id] = self.clock.time() + timeout
      self.launched.extend(tasks)
    self.reply_event.set()

    for task in tasks:
      self.run_task(task)

  def run_task(self, task):
    log.info('Running %s (id %s) on %s' % (task.name, task.task_id, task.slave_id))
    for state in self.executor(task):
      self.send_status_update(task.task_id, state)

  def send_status_update(self, task_id, state, data=b''):
    with self.lock:
      framework = self.framework
    if framework is None:
      log.warning('Dropping status update for task %s, no framework registered.' % task_id)
      return
    framework.dispatch('status_update', TaskStatus(task_id, state, data))

  def send_error(self, code, message):
    with self.lock:
      framework = self.framework
    if framework is None:
      log.warning('Dropping error %r, no framework registered.' % message)
      return
    framework.dispatch('error', code, message)

  def _start_offer_loop(self):
    with self.lock:
      if self._offer_thread is not None:
        return
      self._offer_thread = threading.Thread(
          target=self._offer_loop, name='%s-offers' % self.name)
      self._offer_thread.daemon = True
      self._offer_thread.start()

  def _offer_loop(self):
    while not self._stopped.wait(self.offer_interval):
      self.offer()

  def shutdown(self):
    self._stopped.set()
    if self._offer_thread is not None:
      self._offer_thread.join()
