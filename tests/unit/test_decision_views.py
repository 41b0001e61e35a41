import pytest
from pydantic import ValidationError

from cart_pilot.agent.views import ActionKind, ActionResult, Decision


def test_wire_aliases_map_onto_closed_action_set():
    assert Decision(action="open", target="amazon.com").kind is ActionKind.NAVIGATE
    assert Decision(action="extract_text", target="h1").kind is ActionKind.READ_TEXT
    assert Decision(action="read-text").kind is ActionKind.READ_TEXT


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError):
        Decision(action="scroll", target="body")


def test_read_text_defaults_to_whole_document():
    decision = Decision(action="read_text", reasoning="look around")
    assert decision.target == "body"


def test_targeted_actions_require_a_target():
    with pytest.raises(ValidationError):
        Decision(action="click", target="  ")
    with pytest.raises(ValidationError):
        Decision(action="navigate")


def test_finish_summary_falls_back_to_reasoning():
    decision = Decision(action="finish", reasoning="Headphones are in the cart")
    assert decision.summary == "Headphones are in the cart"


def test_submit_like_only_for_clicks_naming_submit():
    assert Decision(action="click", target="input[type='submit']").is_submit_like
    assert not Decision(action="click", target="#add-to-cart-button").is_submit_like
    assert not Decision(action="type", target="#submit-box", text="x").is_submit_like


def test_action_result_always_explains_itself():
    ok = ActionResult(success=True)
    failed = ActionResult(success=False)
    assert ok.message
    assert failed.error
    assert ActionResult.failure("Action timeout after 10 seconds").is_timeout
    assert not ActionResult.failure("Element not found: #x").is_timeout


def test_blank_type_text_is_kept_verbatim():
    assert Decision(action="type", target="#q", text="").text == ""
    assert Decision(action="type", target="#q", text="   ").text == "   "
    assert Decision(action="type", target="#q").text == ""
