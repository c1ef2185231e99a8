from concurrent.futures import ThreadPoolExecutor
import functools
import logging
import threading

from .api import SchedulerDriver
from .messages import (
    DRIVER_ABORTED,
    DRIVER_NOT_STARTED,
    DRIVER_RUNNING,
    DRIVER_STOPPED,
    TASK_LOST,
    TaskStatus,
)
from .util import camel_call, timed, unique_suffix

log = logging.getLogger(__name__)


class SchedulerProcess:
  """Delivers master events and driver actions to a scheduler one at a time.

  Everything goes through :meth:`dispatch`, which queues onto a single worker
  thread, so the scheduler never sees two callbacks at once.
  """

  def __init__(self, driver, scheduler, master):
    self.driver = driver
    self.scheduler = scheduler
    self.master = master
    self.framework_id = None
    self.pid = unique_suffix('scheduler')

    # events
    self.connected = threading.Event()
    self.aborted = threading.Event()
    self.terminated = threading.Event()

    # saved state
    self.saved_offers = {}  # offer_id => set of slave ids

    self._dispatch_lock = threading.Lock()
    self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self.pid)

  def __str__(self):
    return self.pid

  def dispatch(self, method, *args):
    with self._dispatch_lock:
      if self.terminated.is_set():
        log.info('Dropping %s for %s because it has terminated.' % (method, self.pid))
        return None
      return self._worker.submit(self._invoke, method, *args)

  def terminate(self):
    with self._dispatch_lock:
      self.terminated.set()
      # Anything already queued still runs.
      self._worker.shutdown(wait=False)

  def _invoke(self, method, *args):
    try:
      getattr(self, method)(*args)
    except Exception as e:
      log.exception('Scheduler failed while handling %s' % method)
      self.driver.fail(e)

  def ignore_if_aborted(method):
    @functools.wraps(method)
    def _wrapper(self, *args, **kwargs):
      if self.aborted.is_set():
        log.info('Ignoring %s because the scheduler driver is aborted.' % method.__name__)
        return
      return method(self, *args, **kwargs)
    return _wrapper

  def ignore_if_disconnected(method):
    @functools.wraps(method)
    def _wrapper(self, *args, **kwargs):
      if not self.connected.is_set():
        log.info('Ignoring %s because the scheduler driver is disconnected.' % method.__name__)
        return
      return method(self, *args, **kwargs)
    return _wrapper

  @ignore_if_aborted
  def initialize(self):
    with timed(log.debug, 'scheduler::get_framework_name'):
      name = camel_call(self.scheduler, 'get_framework_name', self.driver)
    with timed(log.debug, 'scheduler::get_executor_info'):
      executor_info = camel_call(self.scheduler, 'get_executor_info', self.driver)
    log.info('Registering framework %r with executor %s' % (name, executor_info.uri))
    self.master.register(self, name, executor_info)

  @ignore_if_aborted
  def registered(self, framework_id):
    if self.connected.is_set():
      log.info('Ignoring registered message as we are already connected.')
      return
    self.framework_id = framework_id
    self.connected.set()

    with timed(log.debug, 'scheduler::registered'):
      camel_call(self.scheduler, 'registered', self.driver, framework_id)

  @ignore_if_disconnected
  @ignore_if_aborted
  def resource_offer(self, offer_id, offers):
    self.saved_offers[offer_id] = set(offer.slave_id for offer in offers)
    with timed(log.debug, 'scheduler::resource_offer'):
      camel_call(self.scheduler, 'resource_offer', self.driver, offer_id, offers)

  @ignore_if_disconnected
  @ignore_if_aborted
  def status_update(self, status):
    self._deliver_status(status)

  @ignore_if_aborted
  def local_status_update(self, status):
    log.info('Generating local status update: %s' % status)
    self._deliver_status(status)

  def _deliver_status(self, status):
    with timed(log.debug, 'scheduler::status_update'):
      camel_call(self.scheduler, 'status_update', self.driver, status)

  @ignore_if_aborted
  def error(self, code, message):
    with timed(log.debug, 'scheduler::error'):
      camel_call(self.scheduler, 'error', self.driver, code, message)

  def _local_lost(self, task, reason):
    self.dispatch('local_status_update',
        TaskStatus(task.task_id, TASK_LOST, reason.encode('utf-8')))

  @ignore_if_aborted
  def reply_to_offer(self, offer_id, tasks, params):
    if not self.connected.is_set():
      for task in tasks:
        self._local_lost(task, 'Master Disconnected')
      return

    offered_slaves = self.saved_offers.pop(offer_id, None)
    if offered_slaves is None:
      log.warning('Offer %s not found.' % offer_id)
      for task in tasks:
        self._local_lost(task, 'Offer %s is no longer valid' % offer_id)
      return

    # Perform some sanity checking on the tasks before launching them
    launchable = []
    for task in tasks:
      if task.slave_id not in offered_slaves:
        self._local_lost(task, 'Malformed: slave %s is not part of offer %s' % (
            task.slave_id, offer_id))
        continue
      launchable.append(task)

    self.master.reply_to_offer(self.framework_id, offer_id, launchable, params)

  @ignore_if_aborted
  def stop(self):
    if self.connected.is_set():
      self.connected.clear()
      self.master.unregister(self.framework_id)

  def abort(self):
    self.connected.clear()
    self.aborted.set()

  del ignore_if_aborted
  del ignore_if_disconnected


class LocalSchedulerDriver(SchedulerDriver):
  """Drives a scheduler against an in-process master."""

  def __init__(self, scheduler, master):
    self.scheduler = scheduler
    self.master = master
    self.scheduler_process = None
    self.lock = threading.Condition()
    self.status = DRIVER_NOT_STARTED
    self.exception = None

  def locked(method):
    @functools.wraps(method)
    def _wrapper(self, *args, **kw):
      with self.lock:
        return method(self, *args, **kw)
    return _wrapper

  @locked
  def start(self):
    if self.status != DRIVER_NOT_STARTED:
      return self.status

    assert self.scheduler_process is None
    self.scheduler_process = SchedulerProcess(self, self.scheduler, self.master)
    self.status = DRIVER_RUNNING
    self.scheduler_process.dispatch('initialize')
    return self.status

  @locked
  def stop(self):
    if self.status not in (DRIVER_RUNNING, DRIVER_ABORTED):
      return self.status

    if self.scheduler_process is not None:
      self.scheduler_process.dispatch('stop')
      self.scheduler_process.terminate()

    aborted = self.status == DRIVER_ABORTED
    self.status = DRIVER_STOPPED
    self.lock.notify_all()
    return DRIVER_ABORTED if aborted else self.status

  @locked
  def abort(self):
    if self.status != DRIVER_RUNNING:
      return self.status

    assert self.scheduler_process is not None
    self.scheduler_process.abort()
    self.scheduler_process.terminate()
    self.status = DRIVER_ABORTED
    self.lock.notify_all()
    return self.status

  @locked
  def fail(self, exception):
    """Abort the driver because a scheduler callback raised ``exception``."""
    if self.exception is None:
      self.exception = exception
    return self.abort()

  @locked
  def join(self):
    if self.status != DRIVER_RUNNING:
      return self.status

    while self.status == DRIVER_RUNNING:
      self.lock.wait()  # Wait until the driver notifies us to break

    log.info("Scheduler driver finished with status %d", self.status)
    assert self.status in (DRIVER_ABORTED, DRIVER_STOPPED)
    return self.status

  @locked
  def run(self):
    status = self.start()
    return status if status != DRIVER_RUNNING else self.join()

  @locked
  def replyToOffer(self, offer_id, tasks, params=None):
    if self.status != DRIVER_RUNNING:
      return self.status
    assert self.scheduler_process is not None
    self.scheduler_process.dispatch('reply_to_offer', offer_id, list(tasks), dict(params or {}))
    return self.status

  del locked

  # idiomatic snake_case aliases.
  reply_to_offer = replyToOffer
