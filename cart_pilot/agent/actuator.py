from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from cart_pilot.agent.state import agent_log
from cart_pilot.controller.views import ActionRequest

if TYPE_CHECKING:
    from cart_pilot.agent.settings import AgentSettings
    from cart_pilot.agent.state import Task
    from cart_pilot.agent.views import ActionResult, Decision
    from cart_pilot.browser.transport import ActionTransport

logger = logging.getLogger(__name__)


class Actuator:
    """Hands a decision to the transport and waits out submit-induced navigations."""

    def __init__(self, transport: ActionTransport, settings: AgentSettings):
        self.transport = transport
        self.settings = settings

    async def act(self, task: Task, decision: Decision) -> ActionResult:
        request = ActionRequest.from_decision(decision)
        agent_log(logging.DEBUG, task.task_id, task.n_steps, f"Delivering {decision.describe()} to context {task.context_id}")

        result = await self.transport.deliver(task.context_id, request)

        if decision.is_submit_like:
            # A submit usually navigates; give the next page time to load before observing it
            agent_log(
                logging.DEBUG,
                task.task_id,
                task.n_steps,
                f"Submit-like click, waiting {self.settings.submit_settle_seconds}s for navigation",
            )
            await asyncio.sleep(self.settings.submit_settle_seconds)

        return result
