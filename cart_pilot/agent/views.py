from __future__ import annotations

import enum
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cart_pilot.timing import now_utc_timestamp

logger = logging.getLogger(__name__)


class ActionKind(str, enum.Enum):
    NAVIGATE = 'navigate'
    CLICK = 'click'
    TYPE = 'type'
    READ_TEXT = 'read_text'
    FINISH = 'finish'

    @classmethod
    def parse(cls, raw: Any) -> 'ActionKind':
        """Map wire names (including legacy aliases) onto the closed action set."""
        if isinstance(raw, cls):
            return raw
        key = str(raw or '').strip().lower().replace('-', '_').replace(' ', '_')
        key = _ACTION_ALIASES.get(key, key)
        return cls(key)


_ACTION_ALIASES = {
    'open': 'navigate',
    'goto': 'navigate',
    'go_to_url': 'navigate',
    'extract_text': 'read_text',
    'read': 'read_text',
    'input_text': 'type',
    'done': 'finish',
}

# Actions that must name the element/URL they operate on
TARGETED_ACTIONS = frozenset({ActionKind.NAVIGATE, ActionKind.CLICK, ActionKind.TYPE, ActionKind.READ_TEXT})

WHOLE_DOCUMENT = 'body'


class Decision(BaseModel):
    """One planner-proposed action plus rationale."""
    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    target: Optional[str] = None
    text: Optional[str] = None
    reasoning: str = ''
    summary: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if 'kind' not in data and 'action' in data:
            data['kind'] = data.pop('action')
        if 'kind' in data:
            data['kind'] = ActionKind.parse(data['kind'])
        for key in ('target', 'summary'):
            if isinstance(data.get(key), str) and not data[key].strip():
                data[key] = None
        kind = data.get('kind')
        if kind is ActionKind.READ_TEXT and not data.get('target'):
            data['target'] = WHOLE_DOCUMENT
        if kind is ActionKind.FINISH and not data.get('summary'):
            data['summary'] = data.get('reasoning') or 'Task finished'
        if kind is ActionKind.TYPE and data.get('text') is None:
            data['text'] = ''
        return data

    @model_validator(mode='after')
    def _check_required_fields(self) -> 'Decision':
        if self.kind in TARGETED_ACTIONS and not self.target:
            raise ValueError(f'{self.kind.value} requires a target')
        if self.kind is ActionKind.FINISH and not self.summary:
            raise ValueError('finish requires a summary')
        return self

    @property
    def is_submit_like(self) -> bool:
        # Heuristic: submit clicks often navigate and break the response channel
        return self.kind is ActionKind.CLICK and 'submit' in (self.target or '').lower()

    def same_action(self, other: 'Decision | ActionRecord') -> bool:
        return self.kind is other.kind and self.target == other.target

    def describe(self) -> str:
        parts = [self.kind.value]
        if self.target:
            parts.append(f': {self.target}')
        if self.text:
            parts.append(f' ("{self.text}")')
        return ''.join(parts)


class ActionRecord(BaseModel):
    """A decision as it appears in the task's action history."""
    kind: ActionKind
    target: Optional[str] = None
    text: Optional[str] = None
    step: int
    timestamp: float = Field(default_factory=now_utc_timestamp)

    @classmethod
    def from_decision(cls, decision: Decision, step: int) -> 'ActionRecord':
        return cls(kind=decision.kind, target=decision.target, text=decision.text, step=step)


class InputDescriptor(BaseModel):
    type: str = ''
    placeholder: str = ''
    label: str = ''


class PageSummary(BaseModel):
    """Cheap structural context returned alongside extracted text."""
    title: str = ''
    url: str = ''
    headings: list[str] = Field(default_factory=list)
    buttons: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    inputs: list[InputDescriptor] = Field(default_factory=list)


class ActionResult(BaseModel):
    """The structured outcome of executing one decision."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    data: Optional[str] = None
    url: Optional[str] = None
    # Diagnostics
    selector: Optional[str] = None
    element_text: Optional[str] = None
    page_info: Optional[PageSummary] = None

    @model_validator(mode='after')
    def _require_explanation(self) -> 'ActionResult':
        if self.success and not self.message:
            self.message = 'Action completed'
        if not self.success and not self.error:
            self.error = self.message or 'Action failed'
        return self

    @property
    def is_timeout(self) -> bool:
        return not self.success and 'timeout' in (self.error or '').lower()

    @classmethod
    def failure(cls, error: str, **kwargs: Any) -> 'ActionResult':
        return cls(success=False, error=error, **kwargs)

    @property
    def detail(self) -> str:
        return (self.message if self.success else self.error) or ''


class TaskAck(BaseModel):
    accepted: bool
    task_id: Optional[str] = None
    reason: Optional[str] = None


class StopAck(BaseModel):
    stopped: bool
    message: str
