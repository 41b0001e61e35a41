from cart_pilot.agent.assessor import Assessor
from cart_pilot.agent.message_manager.service import MessageManager
from cart_pilot.agent.prompts import FINISH_DIRECTIVE, SUBMIT_SUCCEEDED_NOTE, SUBMIT_TIMEOUT_NOTE, SystemPrompt
from cart_pilot.agent.settings import AgentSettings
from cart_pilot.agent.state import Task
from cart_pilot.agent.views import ActionRecord, ActionResult, Decision


def _setup():
    task = Task(goal="find a mug", context_id=1)
    manager = MessageManager(task, SystemPrompt().get_system_message())
    return task, manager, Assessor(AgentSettings())


def _act(task: Task, decision: Decision) -> Decision:
    task.next_step()
    task.record_action(ActionRecord.from_decision(decision, task.n_steps))
    return decision


def _notes(task: Task) -> list[str]:
    return [m.content for m in task.messages if m.role == "system"][1:]


def test_success_resets_counter_and_records_result():
    task, manager, assessor = _setup()
    task.consecutive_failures = 1
    decision = _act(task, Decision(action="read_text", target="body"))

    text = assessor.observe(task, decision, ActionResult(success=True, message="Extracted", data="Mugs"), manager)

    assert task.consecutive_failures == 0
    assert task.messages[-1].content.startswith("Action result: SUCCESS. Extracted Data: Mugs")
    assert "Mugs" in text


def test_submit_success_asks_to_inspect_results():
    task, manager, assessor = _setup()
    decision = _act(task, Decision(action="click", target="input[type='submit']"))

    assessor.observe(task, decision, ActionResult(success=True, message="Clicked"), manager)

    assert _notes(task) == [SUBMIT_SUCCEEDED_NOTE]


def test_failures_escalate_to_finish_directive():
    task, manager, assessor = _setup()
    first = _act(task, Decision(action="click", target="#a"))
    assessor.observe(task, first, ActionResult.failure("Element not found: #a"), manager)
    assert task.consecutive_failures == 1
    assert FINISH_DIRECTIVE not in _notes(task)

    second = _act(task, Decision(action="type", target="#q", text="mug"))
    assessor.observe(task, second, ActionResult.failure("Input element not found: #q"), manager)

    assert task.consecutive_failures == 2
    assert _notes(task)[-1] == FINISH_DIRECTIVE
    assert "typing failed" in _notes(task)[-2]


def test_search_click_failure_gets_search_suggestion():
    task, manager, assessor = _setup()
    decision = _act(task, Decision(action="click", target=".search-btn"))

    assessor.observe(task, decision, ActionResult.failure("Element not found: .search-btn"), manager)

    assert "search button click failed" in _notes(task)[0]


def test_submit_timeout_is_not_escalated():
    task, manager, assessor = _setup()
    task.consecutive_failures = 1
    decision = _act(task, Decision(action="click", target="button[type='submit']"))

    assessor.observe(task, decision, ActionResult.failure("Action timeout after 10 seconds"), manager)

    assert task.consecutive_failures == 0
    assert _notes(task) == [SUBMIT_TIMEOUT_NOTE]


def test_every_action_kind_has_a_failure_suggestion():
    from cart_pilot.agent.prompts import _FAILURE_SUGGESTIONS
    from cart_pilot.agent.views import ActionKind

    assert set(_FAILURE_SUGGESTIONS) == set(ActionKind)
