from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from cart_pilot.llm.messages import AssistantMessage, BaseMessage, SystemMessage, UserMessage

if TYPE_CHECKING:
    from cart_pilot.agent.state import Task
    from cart_pilot.agent.views import ActionResult, Decision

logger = logging.getLogger(__name__)


class MessageManager:
    """
    Maintains a task's conversation transcript in execution order.

    The transcript is the only context the planner sees: the fixed system prompt,
    the user goal, one assistant entry per executed decision, one user entry per
    observed result, and system notes injected by the failure-escalation policy.
    """

    def __init__(self, task: Task, system_message: SystemMessage):
        self.task = task
        if not self.task.messages:
            self.task.messages.append(system_message)
            self.task.messages.append(UserMessage(content=task.goal))

    def get_messages(self) -> list[BaseMessage]:
        return list(self.task.messages)

    def add_system_note(self, note: str) -> None:
        logger.debug(f'System note: {note}')
        self.task.messages.append(SystemMessage(content=note))

    def add_decision(self, decision: Decision) -> None:
        content = f'browser_action({decision.describe()})'
        if decision.reasoning:
            content += f' because: {decision.reasoning}'
        self.task.messages.append(AssistantMessage(content=content))

    def add_action_result(self, result: ActionResult) -> None:
        self.task.messages.append(UserMessage(content=format_action_result(result)))


def format_action_result(result: ActionResult) -> str:
    status = 'SUCCESS' if result.success else 'FAILED'
    content = f'Action result: {status}. {result.detail}'
    if result.data:
        content += f' Data: {result.data}'
    if result.page_info is not None:
        summary = result.page_info.model_dump(exclude_defaults=True)
        if summary:
            content += f' Page: {json.dumps(summary, ensure_ascii=False)}'
    return content
