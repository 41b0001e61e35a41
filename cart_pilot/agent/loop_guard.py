from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from cart_pilot.agent.views import WHOLE_DOCUMENT, ActionKind, ActionRecord, Decision

logger = logging.getLogger(__name__)


def _read_page(reasoning: str) -> Callable[[Decision], Decision]:
    def rewrite(_: Decision) -> Decision:
        return Decision(kind=ActionKind.READ_TEXT, target=WHOLE_DOCUMENT, reasoning=reasoning)
    return rewrite


def _force_finish(_: Decision) -> Decision:
    return Decision(
        kind=ActionKind.FINISH,
        summary='Task appears complete based on previous actions',
        reasoning='Preventing loop by finishing task',
    )


# None means a repeat of that kind is allowed through unchanged
_REMEDIATIONS: dict[ActionKind, Optional[Callable[[Decision], Decision]]] = {
    ActionKind.NAVIGATE: _read_page('Already navigated, now extracting page content to proceed with task'),
    ActionKind.CLICK: _read_page(
        'Previous click failed, extracting page content to understand current state and find alternative approach'
    ),
    ActionKind.READ_TEXT: _force_finish,
    ActionKind.TYPE: None,
    ActionKind.FINISH: None,
}


class LoopGuard:
    """
    Rewrites a proposed decision that repeats recent history.

    A decision repeats when it has the same kind and target as any of the last
    ``window`` recorded decisions (the most recent one included). Rewrites are
    deterministic: repeated navigate/click become a whole-page read, a repeated
    read becomes finish, so read-only cycles always terminate.
    """

    def __init__(self, window: int = 2):
        self.window = window

    def is_repeating(self, decision: Decision, history: Sequence[ActionRecord]) -> bool:
        recent = list(history)[-self.window:] if self.window > 0 else []
        return any(decision.same_action(record) for record in recent)

    def check(self, decision: Decision, history: Sequence[ActionRecord]) -> tuple[Decision, bool]:
        """Return the decision to execute and whether it was rewritten."""
        if not self.is_repeating(decision, history):
            return decision, False
        remediation = _REMEDIATIONS[decision.kind]
        if remediation is None:
            return decision, False
        rewritten = remediation(decision)
        logger.warning(f'Detected repeated action {decision.describe()}, forcing progression with {rewritten.describe()}')
        return rewritten, True
