from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from cart_pilot.agent.prompts import BROWSER_ACTION_TOOL
from cart_pilot.agent.views import WHOLE_DOCUMENT, ActionKind, Decision

if TYPE_CHECKING:
    from cart_pilot.llm.base import BaseChatModel
    from cart_pilot.llm.messages import BaseMessage

logger = logging.getLogger(__name__)

FALLBACK_REASONING = 'No structured decision received, extracting page content to understand current state'


def fallback_decision() -> Decision:
    return Decision(kind=ActionKind.READ_TEXT, target=WHOLE_DOCUMENT, reasoning=FALLBACK_REASONING)


class DecisionMaker:
    """
    Planner oracle adapter: one model call per THINK step, one Decision out.

    The model is constrained to the single ``browser_action`` function. A reply
    without that call, or with arguments that do not form a valid Decision, is
    replaced by a whole-page read so the loop keeps moving. Errors raised by the
    model client itself (network, auth, quota) propagate to the caller.
    """

    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def decide(self, messages: list[BaseMessage]) -> Decision:
        response = await self.llm.ainvoke(
            messages,
            tools=[BROWSER_ACTION_TOOL],
            tool_choice=BROWSER_ACTION_TOOL.name,
        )

        call = response.first_tool_call(BROWSER_ACTION_TOOL.name)
        if call is None:
            preview = (response.completion or '')[:200]
            logger.warning(f'Planner returned no {BROWSER_ACTION_TOOL.name} call, using fallback. Reply: {preview!r}')
            return fallback_decision()

        return parse_decision(call.arguments)


def parse_decision(arguments: dict) -> Decision:
    """Build a Decision from tool-call arguments, falling back on anything malformed."""
    try:
        return Decision.model_validate(arguments)
    except (ValidationError, ValueError) as e:
        logger.warning(f'Planner decision rejected ({e.__class__.__name__}): {arguments!r}')
        return fallback_decision()
