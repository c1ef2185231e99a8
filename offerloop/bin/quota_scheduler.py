import logging
import sys

from offerloop.config import FrameworkConfig
from offerloop.detector import MasterDetector
from offerloop.driver import LocalSchedulerDriver
from offerloop.framework import BootstrapError, QuotaScheduler
from offerloop.messages import DRIVER_STOPPED


FORMAT = "%(levelname)s:%(asctime)s.%(msecs)03d %(threadName)s %(message)s"
logging.basicConfig(format=FORMAT, level=logging.DEBUG, datefmt='%Y-%m-%d %H:%M:%S')
log = logging.getLogger(__name__)

USAGE = 'Usage: quota_scheduler <master>'


def main(args):
  if len(args) != 1:
    print(USAGE, file=sys.stderr)
    return 1

  try:
    config = FrameworkConfig.from_environ()
    master = MasterDetector.from_uri(args[0]).detect()
  except (FrameworkConfig.Error, MasterDetector.Error) as e:
    log.fatal('Failed to start: %s' % e)
    return 1

  driver = LocalSchedulerDriver(QuotaScheduler(config), master)

  print('Running driver')
  status = driver.run()
  master.shutdown()

  if isinstance(driver.exception, BootstrapError):
    log.fatal('Failed to bootstrap framework: %s' % driver.exception)
    return 1
  if driver.exception is not None:
    log.fatal('Framework terminated by %r' % driver.exception)
    return 1
  return 0 if status == DRIVER_STOPPED else 1


if __name__ == '__main__':
  sys.exit(main(sys.argv[1:]))
