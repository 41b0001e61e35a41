import pytest

from cart_pilot.agent.decision_maker import FALLBACK_REASONING, DecisionMaker, parse_decision
from cart_pilot.agent.views import ActionKind
from cart_pilot.exceptions import LLMException
from cart_pilot.llm.messages import UserMessage
from cart_pilot.llm.views import ChatInvokeCompletion
from tests.conftest import ScriptedLLM, tool_call


@pytest.mark.asyncio
async def test_tool_call_becomes_decision():
    llm = ScriptedLLM(tool_call("navigate", target="amazon.com", reasoning="start there"))
    decision = await DecisionMaker(llm).decide([UserMessage(content="buy headphones")])

    assert decision.kind is ActionKind.NAVIGATE
    assert decision.target == "amazon.com"
    assert llm.calls[0]["tool_choice"] == "browser_action"
    assert [tool.name for tool in llm.calls[0]["tools"]] == ["browser_action"]


@pytest.mark.asyncio
async def test_plain_text_reply_falls_back_to_page_read():
    llm = ScriptedLLM(ChatInvokeCompletion(completion="I would click the button"))
    decision = await DecisionMaker(llm).decide([UserMessage(content="buy headphones")])

    assert decision.kind is ActionKind.READ_TEXT
    assert decision.target == "body"
    assert decision.reasoning == FALLBACK_REASONING


def test_invalid_arguments_fall_back():
    assert parse_decision({"action": "click"}).reasoning == FALLBACK_REASONING
    assert parse_decision({"action": "teleport", "target": "x"}).kind is ActionKind.READ_TEXT


@pytest.mark.asyncio
async def test_model_errors_propagate():
    llm = ScriptedLLM(LLMException(503, "upstream down"))
    with pytest.raises(LLMException):
        await DecisionMaker(llm).decide([UserMessage(content="buy headphones")])
