import logging
from urllib.parse import urlparse

from .local import LocalMaster

log = logging.getLogger(__name__)


class MasterDetector:
  class Error(Exception): pass
  class InvalidUri(Error): pass
  class CannotDetect(Error): pass

  _DETECTORS = []

  @classmethod
  def from_uri(cls, uri):
    if uri.lower().startswith('zk:'):
      raise cls.InvalidUri('The zookeeper master detector is not supported')
    for detector_cls in cls._DETECTORS:
      try:
        return detector_cls.from_uri(uri)
      except cls.InvalidUri:
        continue
    raise cls.CannotDetect('No compatible master detectors found for %r' % uri)

  @classmethod
  def register(cls, detector_cls):
    cls._DETECTORS.append(detector_cls)

  def detect(self):
    """Return the master a scheduler driver should register with."""
    raise NotImplementedError


class LocalMasterDetector(MasterDetector):
  """Detects an in-process master from ``local``, ``local:N`` or ``local://N``."""

  SCHEME = 'local'
  DEFAULT_SLAVES = 1

  @classmethod
  def from_uri(cls, uri):
    if uri == cls.SCHEME:
      return cls()
    url = urlparse(uri)
    if url.scheme != cls.SCHEME:
      raise cls.InvalidUri('Not a local master: %r' % uri)
    count = url.netloc or url.path
    try:
      slaves = int(count)
    except ValueError:
      raise cls.InvalidUri('Invalid slave count in %r' % uri)
    if slaves < 1:
      raise cls.InvalidUri('A local master needs at least one slave, got %d' % slaves)
    return cls(slaves=slaves)

  def __init__(self, slaves=DEFAULT_SLAVES, **master_options):
    self.slaves = slaves
    self.master_options = master_options

  def detect(self):
    master = LocalMaster.with_slaves(self.slaves, **self.master_options)
    log.info('Detected local master %s with %d slaves' % (master, self.slaves))
    return master


MasterDetector.register(LocalMasterDetector)
