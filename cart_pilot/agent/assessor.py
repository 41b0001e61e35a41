from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cart_pilot.agent.prompts import (
    FINISH_DIRECTIVE,
    SUBMIT_SUCCEEDED_NOTE,
    SUBMIT_TIMEOUT_NOTE,
    next_action_suggestion,
)
from cart_pilot.agent.state import agent_log

if TYPE_CHECKING:
    from cart_pilot.agent.message_manager.service import MessageManager
    from cart_pilot.agent.settings import AgentSettings
    from cart_pilot.agent.state import Task
    from cart_pilot.agent.views import ActionResult, Decision

logger = logging.getLogger(__name__)


class Assessor:
    """
    Turns an action result into transcript entries and failure-counter updates.

    - success: counter reset; after a submit-like click the planner is told to inspect the results
    - timeout of a submit-like click: ambiguous (the navigation may have worked), so the counter
      is lowered by one and a verification note is added instead of escalating
    - any other failure: counter +1, a suggestion keyed on the failed action kind, and
      once the counter reaches the threshold a directive to finish
    """

    def __init__(self, settings: AgentSettings):
        self.settings = settings

    def observe(self, task: Task, decision: Decision, result: ActionResult, message_manager: MessageManager) -> str:
        message_manager.add_action_result(result)

        if result.success:
            task.consecutive_failures = 0
            if decision.is_submit_like:
                message_manager.add_system_note(SUBMIT_SUCCEEDED_NOTE)
        elif decision.is_submit_like and result.is_timeout:
            task.consecutive_failures = max(0, task.consecutive_failures - 1)
            agent_log(logging.INFO, task.task_id, task.n_steps, "Submit click timed out, asking planner to verify")
            message_manager.add_system_note(SUBMIT_TIMEOUT_NOTE)
        else:
            task.consecutive_failures += 1
            agent_log(
                logging.WARNING,
                task.task_id,
                task.n_steps,
                f"Action failed ({task.consecutive_failures} in a row): {result.error}",
            )
            message_manager.add_system_note(next_action_suggestion(task.last_action))
            if task.consecutive_failures >= self.settings.max_failures_before_finish:
                message_manager.add_system_note(FINISH_DIRECTIVE)

        return self.describe(result)

    def describe(self, result: ActionResult) -> str:
        """One-line observation text for progress events."""
        if not result.success:
            return f"❌ {result.error}"
        text = f"✅ {result.message}"
        if result.data:
            preview = result.data[: self.settings.observation_data_preview]
            ellipsis = "..." if len(result.data) > len(preview) else ""
            text += f" | Data: {preview}{ellipsis}"
        return text
