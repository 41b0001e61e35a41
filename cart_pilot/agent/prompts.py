from __future__ import annotations

from cart_pilot.agent.views import ActionKind, ActionRecord
from cart_pilot.llm.messages import SystemMessage
from cart_pilot.llm.views import ToolDefinition

BROWSER_ACTION_TOOL = ToolDefinition(
    name='browser_action',
    description='Execute a browser automation action',
    parameters={
        'type': 'object',
        'properties': {
            'action': {
                'type': 'string',
                'enum': [kind.value for kind in ActionKind],
                'description': 'The action to perform',
            },
            'target': {
                'type': 'string',
                'description': 'CSS selector (optionally with :contains("text")) or URL for the action',
            },
            'text': {
                'type': 'string',
                'description': 'Text to type (for type action)',
            },
            'reasoning': {
                'type': 'string',
                'description': 'Why you chose this action',
            },
            'summary': {
                'type': 'string',
                'description': 'Task completion summary (for finish action)',
            },
        },
        'required': ['action', 'reasoning'],
    },
)


class SystemPrompt:
    """Fixed instructions seeding every task transcript."""

    def __init__(self, max_steps: int = 10):
        self.max_steps = max_steps

    def get_system_message(self) -> SystemMessage:
        return SystemMessage(content=self.render())

    def render(self) -> str:
        return f"""You are an AI browser automation agent. Your goal is to complete user tasks by controlling a web browser through the browser_action tool.

AVAILABLE ACTIONS:
- navigate(url): Navigate to a URL
- click(selector): Click an element using a CSS selector
- type(selector, text): Type text into an input field
- read_text(selector): Get text content from elements (defaults to the whole page)
- finish(summary): Complete the task with a summary

Selectors may filter by visible text: button:contains("Add to cart") matches buttons containing that text,
and .card:contains("Blue") a matches links inside the first card containing "Blue".

CORE PRINCIPLES:
1. Think step-by-step before each action and always explain your reasoning
2. Use simple, reliable selectors when possible
3. Read page content to understand what is available before acting on it
4. NEVER repeat the same action twice in a row
5. If an action fails, try a DIFFERENT approach instead of retrying it
6. Maximum 2 attempts per action type, then move to the next logical step
7. You have at most {self.max_steps} steps; finish as soon as the main objective is complete

TASK APPROACH:
1. If the user asks to "go to" a website, navigate ONCE, then read the page content
2. If the user asks to "search for" something, find the search box, type the query and submit
3. If the user asks to "buy" or "add to cart", find and click the appropriate buttons
4. After a submit click that times out, read the page to check whether it worked

Example flow for "Go to Amazon and search for headphones":
1. navigate(amazon.com)
2. read_text(body)
3. type(input[name='field-keywords'], "headphones")
4. click(input[type='submit'])
5. read_text(body)
6. click(.s-result-item .a-link-normal)
7. click(#add-to-cart-button)
8. finish("Added headphones to the cart")

Checkout and payment are out of scope: stop at the cart and finish."""


_FAILURE_SUGGESTIONS = {
    ActionKind.NAVIGATE: 'Navigation failed. Check the URL, or read the current page to decide how to continue.',
    ActionKind.CLICK: "The click failed. Use read_text to see what's available on the page, or try a different selector.",
    ActionKind.TYPE: (
        'The typing failed. Read the page content to verify the input field is present, '
        'or try a different selector.'
    ),
    ActionKind.READ_TEXT: 'Text extraction failed. Try a different selector or approach.',
    ActionKind.FINISH: 'Use the finish action with a summary of what was completed.',
}

_SEARCH_CLICK_SUGGESTION = (
    'The search button click failed. Read the page content to see if the search was '
    'successful, or look for a different submit control.'
)


def next_action_suggestion(last: ActionRecord | None) -> str:
    """Corrective hint keyed on the kind of the action that just failed."""
    if last is None:
        return "Try reading the page content to understand what's available."
    target = (last.target or '').lower()
    if last.kind is ActionKind.CLICK and any(word in target for word in ('search', 'btn', 'submit')):
        return _SEARCH_CLICK_SUGGESTION
    return _FAILURE_SUGGESTIONS[last.kind]


FINISH_DIRECTIVE = (
    'Too many failures. Please use the finish action to complete what you can '
    'or explain what went wrong.'
)

SUBMIT_SUCCEEDED_NOTE = (
    'Search button click was successful! The search has been submitted. '
    'Now read the page content to see the search results and proceed with the task.'
)

SUBMIT_TIMEOUT_NOTE = (
    'Search button click timed out, but this often means the search was submitted successfully. '
    'Use read_text to check whether search results are displayed instead of clicking again.'
)


def observe_error_note(error: Exception) -> str:
    return f'Error occurred while processing the last result: {error}. Try a different approach.'
