class Scheduler:
  """Callbacks a framework implements.  The driver invokes them one at a time.

  Implementations may spell the callbacks in snake_case or camelCase; a
  camelCase override in a subclass takes precedence over the defaults here.
  """

  def get_framework_name(self, driver):
    raise NotImplementedError

  def get_executor_info(self, driver):
    raise NotImplementedError

  def registered(self, driver, framework_id):
    pass

  def resource_offer(self, driver, offer_id, offers):
    pass

  def status_update(self, driver, status):
    pass

  def error(self, driver, code, message):
    pass


class SchedulerDriver:
  def start(self):
    pass

  def stop(self):
    pass

  def abort(self):
    pass

  def join(self):
    pass

  def run(self):
    pass

  def reply_to_offer(self, offer_id, tasks, params=None):
    pass

  replyToOffer = reply_to_offer
