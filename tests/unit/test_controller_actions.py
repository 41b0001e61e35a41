import pytest

from cart_pilot.agent.views import ActionKind
from cart_pilot.controller.service import Controller, is_stale_context_error
from cart_pilot.controller.views import ActionRequest, ControllerSettings
from cart_pilot.exceptions import StaleExecutionContextError
from tests.conftest import FakeElement, FakePage


@pytest.mark.asyncio
async def test_navigate_adds_scheme_and_commits_early(fast_controller_settings):
    page = FakePage()
    result = await Controller(fast_controller_settings).execute(
        page, ActionRequest(kind=ActionKind.NAVIGATE, target="amazon.com")
    )

    assert result.success
    assert page.visited == [("https://amazon.com", "commit")]
    assert result.url == "https://amazon.com"


@pytest.mark.asyncio
async def test_click_reports_element_text_preview(fast_controller_settings):
    button = FakeElement("Add to Cart " + "x" * 100, selectors={"#add-to-cart-button"})
    page = FakePage([button])
    result = await Controller(fast_controller_settings).execute(
        page, ActionRequest(kind=ActionKind.CLICK, target="#add-to-cart-button")
    )

    assert result.success
    assert result.message == "Clicked: #add-to-cart-button"
    assert button.clicks == 1
    assert button.scrolled
    assert len(result.element_text) == 50


@pytest.mark.asyncio
async def test_click_on_missing_element_fails(fast_controller_settings):
    result = await Controller(fast_controller_settings).execute(
        FakePage(), ActionRequest(kind=ActionKind.CLICK, target="#nope")
    )
    assert not result.success
    assert result.error == "Element not found: #nope"


@pytest.mark.asyncio
async def test_type_emits_input_per_character_then_change(fast_controller_settings):
    box = FakeElement(selectors={"#twotabsearchtextbox"})
    box.value = "old"
    page = FakePage([box])
    result = await Controller(fast_controller_settings).execute(
        page, ActionRequest(kind=ActionKind.TYPE, target="#twotabsearchtextbox", text="mug")
    )

    assert result.success
    assert box.value == "mug"
    assert box.focused
    assert box.events == ["input", "input", "input", "change"]


@pytest.mark.asyncio
async def test_read_text_joins_truncates_and_summarizes():
    settings = ControllerSettings(navigate_settle_seconds=0, click_settle_seconds=0, max_text_length=20, summary_item_limit=2)
    summary = {"title": "Results", "url": "https://shop.example/s", "headings": ["a", "b", "c"], "links": ["x"]}
    page = FakePage(
        [FakeElement("  First   result ", selectors={".r"}), FakeElement("Second result", selectors={".r"})],
        summary=summary,
    )
    result = await Controller(settings).execute(page, ActionRequest(kind=ActionKind.READ_TEXT, target=".r"))

    assert result.success
    assert result.data == "First result\n\nSecond"
    assert result.page_info.title == "Results"
    assert result.page_info.headings == ["a", "b"]
    assert result.message == "Extracted text from: .r"


@pytest.mark.asyncio
async def test_read_text_without_matches_fails(fast_controller_settings):
    result = await Controller(fast_controller_settings).execute(
        FakePage(), ActionRequest(kind=ActionKind.READ_TEXT, target=".missing")
    )
    assert result.error == "No elements found: .missing"


@pytest.mark.asyncio
async def test_element_errors_become_failed_results(fast_controller_settings):
    button = FakeElement("Buy", selectors={"#buy"}, click_error=RuntimeError("Element is not attached"))
    result = await Controller(fast_controller_settings).execute(
        FakePage([button]), ActionRequest(kind=ActionKind.CLICK, target="#buy")
    )
    assert not result.success
    assert "Element is not attached" in result.error


@pytest.mark.asyncio
async def test_stale_context_errors_are_reraised(fast_controller_settings):
    page = FakePage()
    page.query_errors.append(RuntimeError("Execution context was destroyed, most likely because of a navigation"))
    with pytest.raises(RuntimeError):
        await Controller(fast_controller_settings).execute(page, ActionRequest(kind=ActionKind.CLICK, target="#buy"))


@pytest.mark.asyncio
async def test_finish_is_not_executable(fast_controller_settings):
    result = await Controller(fast_controller_settings).execute(FakePage(), ActionRequest(kind=ActionKind.FINISH))
    assert not result.success


@pytest.mark.asyncio
async def test_action_log_is_bounded():
    settings = ControllerSettings(click_settle_seconds=0, action_log_size=3)
    controller = Controller(settings)
    for i in range(5):
        await controller.execute(FakePage(), ActionRequest(kind=ActionKind.CLICK, target=f"#b{i}"))

    log = controller.get_action_log()
    assert [entry.target for entry in log] == ["#b2", "#b3", "#b4"]
    assert not any(entry.success for entry in log)


def test_stale_error_detection():
    assert is_stale_context_error(StaleExecutionContextError("gone"))
    assert is_stale_context_error(RuntimeError("Frame was detached"))
    assert not is_stale_context_error(RuntimeError("Timeout 30000ms exceeded"))


def test_every_action_kind_has_a_handler_slot():
    assert set(Controller()._handlers) == set(ActionKind)
