from offerloop.messages import SlaveOffer, TaskDescription
from offerloop.policy import OfferEvaluator
from offerloop.state import FrameworkState, Phase
from offerloop.testing import fake_offers

import pytest


def registered_state(total_quota=5):
  state = FrameworkState(total_quota)
  state.transition(Phase.REGISTERED)
  return state


def test_launches_one_task_per_offer_until_quota():
  state = registered_state()
  evaluator = OfferEvaluator()

  launched = []
  for _ in range(5):
    tasks, _ = evaluator.evaluate(state, fake_offers('slave-0'))
    assert len(tasks) == 1
    launched.extend(tasks)

  assert [task.task_id for task in launched] == [0, 1, 2, 3, 4]
  assert state.launched_count == 5


def test_only_first_slave_is_used():
  state = registered_state()
  tasks, _ = OfferEvaluator().evaluate(state, fake_offers('slave-0', 'slave-1', 'slave-2'))
  assert tasks == [TaskDescription(0, 'slave-0', 'task 0', {'cpus': '1', 'mem': '32'}, b'')]
  assert state.launched_count == 1


def test_fixed_resources_regardless_of_offer():
  state = registered_state()
  tiny = [SlaveOffer('slave-0', 'fake_host', {'cpus': '0.1', 'mem': '1'})]
  tasks, _ = OfferEvaluator().evaluate(state, tiny)
  assert tasks[0].params == {'cpus': '1', 'mem': '32'}

  tasks, _ = OfferEvaluator(resources={'cpus': '2', 'mem': '128'}).evaluate(state, tiny)
  assert tasks[0].params == {'cpus': '2', 'mem': '128'}


def test_no_tasks_once_quota_launched():
  state = registered_state(total_quota=2)
  evaluator = OfferEvaluator()
  evaluator.evaluate(state, fake_offers())
  evaluator.evaluate(state, fake_offers())

  tasks, reply = evaluator.evaluate(state, fake_offers('slave-0', 'slave-1'))
  assert tasks == []
  assert reply.tasks == []
  assert state.launched_count == 2


def test_reply_policy_carries_timeout():
  state = registered_state()
  tasks, reply = OfferEvaluator().evaluate(state, fake_offers())
  assert reply.params == {'timeout': '1'}
  assert reply.tasks == tasks

  _, reply = OfferEvaluator(timeout='500ms').evaluate(state, fake_offers())
  assert reply.params == {'timeout': '500ms'}


def test_first_offer_moves_to_running():
  state = registered_state()
  evaluator = OfferEvaluator()
  evaluator.evaluate(state, fake_offers())
  assert state.phase == Phase.RUNNING
  evaluator.evaluate(state, fake_offers())
  assert state.phase == Phase.RUNNING


def test_malformed_offer():
  state = registered_state()
  with pytest.raises(OfferEvaluator.MalformedOffer):
    OfferEvaluator().evaluate(state, [])
  assert state.launched_count == 0


def test_offer_before_registration():
  state = FrameworkState(5)
  with pytest.raises(FrameworkState.InvalidTransition):
    OfferEvaluator().evaluate(state, fake_offers())
  assert state.launched_count == 0
