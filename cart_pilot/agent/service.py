from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from cart_pilot.agent.actuator import Actuator
from cart_pilot.agent.assessor import Assessor
from cart_pilot.agent.decision_maker import DecisionMaker
from cart_pilot.agent.events import EventSink, EventType, NullEventSink, ProgressEvent, safe_emit
from cart_pilot.agent.loop_guard import LoopGuard
from cart_pilot.agent.message_manager.service import MessageManager
from cart_pilot.agent.prompts import SystemPrompt, observe_error_note
from cart_pilot.agent.settings import AgentSettings
from cart_pilot.agent.state import AgentStatus, FailureReason, Task, TaskOutcome, agent_log
from cart_pilot.agent.views import ActionKind, ActionRecord, Decision, StopAck, TaskAck
from cart_pilot.exceptions import AgentConfigurationError

if TYPE_CHECKING:
    from cart_pilot.browser.transport import ActionTransport
    from cart_pilot.llm.base import BaseChatModel

logger = logging.getLogger(__name__)


class Agent:
    """
    Drives one task at a time through THINK -> ACT -> OBSERVE steps.

    The agent owns at most one live Task. ``start_task`` claims the slot
    synchronously and schedules the loop; ``stop_task`` aborts and frees it.
    The loop re-checks after every await that its Task still holds the slot
    and was not aborted, and drops whatever it was doing otherwise, so nothing
    is emitted for a task after its ``task_aborted`` event.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        transport: ActionTransport,
        settings: Optional[AgentSettings] = None,
        event_sink: Optional[EventSink] = None,
    ):
        if llm is None:
            raise AgentConfigurationError("Agent requires a chat model")
        if transport is None or not hasattr(transport, "deliver"):
            raise AgentConfigurationError("Agent requires a transport with a deliver() coroutine")

        self.settings = settings or AgentSettings()
        self.event_sink: EventSink = event_sink or NullEventSink()
        self.decision_maker = DecisionMaker(llm)
        self.loop_guard = LoopGuard(window=self.settings.guard_window)
        self.actuator = Actuator(transport, self.settings)
        self.assessor = Assessor(self.settings)
        self.system_prompt = SystemPrompt(max_steps=self.settings.max_steps)

        self._task: Optional[Task] = None
        self._last_task: Optional[Task] = None
        self._runner: Optional[asyncio.Task] = None

    # --- Public surface ---

    @property
    def status(self) -> AgentStatus:
        if self._task is None:
            return AgentStatus.IDLE
        return self._task.status

    @property
    def current_task(self) -> Optional[Task]:
        return self._task

    def start_task(self, goal: str, context_id: int) -> TaskAck:
        goal = (goal or "").strip()
        if not goal:
            return TaskAck(accepted=False, reason="Goal must not be empty")
        if self._task is not None:
            logger.warning(f"Rejecting new task while task {self._task.task_id} is {self._task.status.value}")
            return TaskAck(accepted=False, task_id=self._task.task_id, reason="Agent is already running a task")

        task = Task(
            goal=goal,
            context_id=context_id,
            max_steps=self.settings.max_steps,
            history_window=self.settings.history_window,
        )
        message_manager = MessageManager(task, self.system_prompt.get_system_message())
        loop = self._run_loop(task, message_manager)
        try:
            runner = asyncio.create_task(loop, name=f"cart_pilot-task-{task.task_id}")
        except RuntimeError:
            loop.close()
            raise
        # The runner first runs at the caller's next await, after the slot is claimed
        self._runner = runner
        self._task = task
        self._last_task = task

        agent_log(logging.INFO, task.task_id, 0, f"🚀 Starting task: {goal}")
        self._emit(task, EventType.TASK_STARTED, f"🤖 Starting task: {goal}")
        return TaskAck(accepted=True, task_id=task.task_id)

    async def wait(self) -> TaskOutcome:
        if self._runner is None or self._last_task is None:
            raise RuntimeError("No task has been started")
        await self._runner
        return TaskOutcome.from_task(self._last_task)

    async def run(self, goal: str, context_id: int) -> TaskOutcome:
        ack = self.start_task(goal, context_id)
        if not ack.accepted:
            raise RuntimeError(ack.reason)
        return await self.wait()

    def stop_task(self) -> StopAck:
        task = self._task
        if task is None:
            return StopAck(stopped=False, message="No agent running")

        task.set_status(AgentStatus.ABORTED)
        self._task = None
        agent_log(logging.INFO, task.task_id, task.n_steps, "🛑 Task aborted by user")
        self._emit(task, EventType.TASK_ABORTED, "🛑 Task aborted by user")
        return StopAck(stopped=True, message="Task aborted")

    # --- Loop ---

    def _is_live(self, task: Task) -> bool:
        return self._task is task and task.status is not AgentStatus.ABORTED

    async def _run_loop(self, task: Task, message_manager: MessageManager) -> None:
        try:
            while task.n_steps < task.max_steps:
                if not self._is_live(task):
                    return
                step = task.next_step()

                task.set_status(AgentStatus.THINKING)
                self._emit(task, EventType.THINKING, f"🤔 Thinking... (step {step}/{task.max_steps})")
                if not self._is_live(task):
                    return
                decision = await self.decision_maker.decide(message_manager.get_messages())
                if not self._is_live(task):
                    return

                decision, rewritten = self.loop_guard.check(decision, task.recent_actions(self.settings.guard_window))
                if rewritten:
                    agent_log(logging.WARNING, task.task_id, step, f"🔁 Loop detected, rewritten to {decision.describe()}")
                if decision.reasoning:
                    self._emit(task, EventType.THINKING, f"💭 {decision.reasoning}")
                    if not self._is_live(task):
                        return

                task.record_action(ActionRecord.from_decision(decision, step))
                message_manager.add_decision(decision)

                if decision.kind is ActionKind.FINISH:
                    self._complete(task, decision)
                    return

                task.set_status(AgentStatus.ACTING)
                self._emit(task, EventType.ACTION, f"🔧 {decision.describe()}")
                if not self._is_live(task):
                    return
                result = await self.actuator.act(task, decision)
                if not self._is_live(task):
                    return

                task.set_status(AgentStatus.OBSERVING)
                try:
                    observation = self.assessor.observe(task, decision, result, message_manager)
                except Exception as e:
                    agent_log(logging.WARNING, task.task_id, step, f"Failed to process action result: {e}")
                    message_manager.add_system_note(observe_error_note(e))
                else:
                    self._emit(task, EventType.OBSERVATION, observation)

                await asyncio.sleep(self.settings.step_delay_seconds)
                if not self._is_live(task):
                    return

            self._fail(task, "Task reached maximum steps limit", FailureReason.MAX_STEPS, icon="⏰")
        except Exception as e:
            if not self._is_live(task):
                return
            logger.exception(f"Task {task.task_id} failed at step {task.n_steps}")
            self._fail(task, str(e) or type(e).__name__, FailureReason.EXCEPTION)

    def _complete(self, task: Task, decision: Decision) -> None:
        task.summary = decision.summary
        task.set_status(AgentStatus.COMPLETED)
        self._task = None
        agent_log(35, task.task_id, task.n_steps, f"✅ Task completed: {task.summary}")
        self._emit(task, EventType.TASK_COMPLETED, f"✅ Task completed: {task.summary}")

    def _fail(self, task: Task, error: str, reason: FailureReason, icon: str = "❌") -> None:
        task.error = error
        task.failure_reason = reason
        task.set_status(AgentStatus.FAILED)
        self._task = None
        agent_log(logging.ERROR, task.task_id, task.n_steps, f"{icon} Task failed: {error}")
        if reason is FailureReason.MAX_STEPS:
            self._emit(task, EventType.TASK_FAILED, f"{icon} {error}")
        else:
            self._emit(task, EventType.TASK_FAILED, f"{icon} Task failed: {error}")

    def _emit(self, task: Task, event_type: EventType, message: str) -> None:
        safe_emit(self.event_sink, ProgressEvent(type=event_type, message=message, task_id=task.task_id))
