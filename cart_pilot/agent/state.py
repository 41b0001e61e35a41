from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Optional

from cart_pilot.agent.views import ActionRecord
from cart_pilot.exceptions import InvalidStatusTransitionError
from cart_pilot.llm.messages import BaseMessage

logger = logging.getLogger(__name__)


class AgentStatus(Enum):
    IDLE = "idle"
    THINKING = "thinking"
    ACTING = "acting"
    OBSERVING = "observing"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"


RUNNING_STATES = {AgentStatus.THINKING, AgentStatus.ACTING, AgentStatus.OBSERVING}
TERMINAL_STATES = {AgentStatus.COMPLETED, AgentStatus.FAILED, AgentStatus.ABORTED}


class FailureReason(Enum):
    MAX_STEPS = "max_steps"
    EXCEPTION = "exception"


def agent_log(level: int, task_id: str, step: int, message: str, **kwargs) -> None:
    logger.log(level, message, extra={"task_id": task_id, "step": step}, **kwargs)


@dataclass
class Task:
    """One user goal under automation. Owned exclusively by the Agent."""
    goal: str
    context_id: int
    max_steps: int = 10
    history_window: int = 10
    task_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    status: AgentStatus = AgentStatus.IDLE
    n_steps: int = 0
    consecutive_failures: int = 0
    messages: list[BaseMessage] = field(default_factory=list)
    action_history: Deque[ActionRecord] = field(init=False)
    summary: Optional[str] = None
    error: Optional[str] = None
    failure_reason: Optional[FailureReason] = None

    def __post_init__(self) -> None:
        self.action_history = deque(maxlen=max(1, self.history_window))

    @property
    def is_running(self) -> bool:
        return self.status in RUNNING_STATES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def last_action(self) -> Optional[ActionRecord]:
        return self.action_history[-1] if self.action_history else None

    def set_status(self, new_status: AgentStatus) -> None:
        if self.status in TERMINAL_STATES and new_status is not self.status:
            raise InvalidStatusTransitionError(
                f"Task {self.task_id} is {self.status.value}; cannot move to {new_status.value}"
            )
        if new_status is AgentStatus.IDLE and self.status is not AgentStatus.IDLE:
            raise InvalidStatusTransitionError(f"Task {self.task_id} cannot return to idle")
        self.status = new_status

    def next_step(self) -> int:
        if self.n_steps >= self.max_steps:
            raise InvalidStatusTransitionError(f"Task {self.task_id} exhausted its {self.max_steps} step budget")
        self.n_steps += 1
        return self.n_steps

    def record_action(self, record: ActionRecord) -> None:
        self.action_history.append(record)

    def recent_actions(self, window: int) -> list[ActionRecord]:
        if window <= 0:
            return []
        return list(self.action_history)[-window:]


@dataclass
class TaskOutcome:
    task_id: str
    goal: str
    status: AgentStatus
    steps: int
    summary: Optional[str] = None
    error: Optional[str] = None
    failure_reason: Optional[FailureReason] = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskOutcome":
        return cls(
            task_id=task.task_id,
            goal=task.goal,
            status=task.status,
            steps=task.n_steps,
            summary=task.summary,
            error=task.error,
            failure_reason=task.failure_reason,
        )

    @property
    def reached_step_limit(self) -> bool:
        return self.failure_reason is FailureReason.MAX_STEPS
