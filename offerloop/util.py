from contextlib import contextmanager
import re
import threading
import time


@contextmanager
def timed(logger=print, message=None):
  """Log how long the body of the with block took, in milliseconds."""
  started = time.time()
  try:
    yield
  finally:
    logger('%s: %.1fms' % (message, 1000.0 * (time.time() - started)))


_SUFFIX_LOCK = threading.Lock()
_SUFFIX = 0


def unique_suffix(name):
  global _SUFFIX
  with _SUFFIX_LOCK:
    _SUFFIX += 1
    return '%s(%d)' % (name, _SUFFIX)


def camel(name):
  head, *rest = name.split('_')
  return head + ''.join(word.capitalize() for word in rest)


def _definition_depth(instance, name):
  # 0 for attributes set on the instance itself, 1 for its class and so on up
  # the mro.  Attributes served by __getattr__ (mocks) count as the instance's.
  if name in getattr(instance, '__dict__', {}):
    return 0
  for depth, klass in enumerate(type(instance).__mro__, 1):
    if name in vars(klass):
      return depth
  return 0


def camel_call(instance, method, *args, **kw):
  """Call ``method`` on ``instance`` in whichever spelling it implements.

  When both the snake_case and the camelCase spelling resolve, the one defined
  closest to the instance's own class wins, so a subclass overriding only the
  camelCase name of a base class callback still gets called.  Ties go to
  snake_case.
  """
  names = [method] if camel(method) == method else [method, camel(method)]
  candidates = []
  for name in names:
    bound = getattr(instance, name, None)
    if bound is not None:
      candidates.append((_definition_depth(instance, name), bound))
  if not candidates:
    raise AttributeError('%r implements neither %s nor %s' % (
        instance, method, camel(method)))
  _, bound = min(candidates, key=lambda candidate: candidate[0])
  return bound(*args, **kw)


# unit => (multiplier, divisor); divide for sub-second units to keep exact decimals.
_DURATION_UNITS = {
  'ns': (1, 1000000000),
  'us': (1, 1000000),
  'ms': (1, 1000),
  'secs': (1, 1),
  'mins': (60, 1),
  'hrs': (3600, 1),
  'days': (86400, 1),
  'weeks': (86400 * 7, 1),
}

_DURATION_RE = re.compile(r'^(-?\d+(?:\.\d+)?)(%s)?$' % '|'.join(_DURATION_UNITS))


def duration_to_seconds(duration):
  """Convert a Mesos-style duration string (e.g. '1', '500ms', '3hrs') into seconds."""
  if not isinstance(duration, str):
    raise ValueError('Duration must be a string, got %s' % type(duration))
  match = _DURATION_RE.match(duration.strip())
  if not match:
    raise ValueError('Invalid duration: %r' % duration)
  value, unit = match.groups()
  multiplier, divisor = _DURATION_UNITS[unit or 'secs']
  return float(value) * multiplier / divisor
