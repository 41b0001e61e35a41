from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from cart_pilot.agent.views import ActionKind, Decision
from cart_pilot.timing import now_utc_timestamp


class ActionRequest(BaseModel):
    """What the transport carries to the page: one primitive action."""
    kind: ActionKind
    target: Optional[str] = None
    text: Optional[str] = None

    @classmethod
    def from_decision(cls, decision: Decision) -> 'ActionRequest':
        return cls(kind=decision.kind, target=decision.target, text=decision.text)


class ActionLogEntry(BaseModel):
    kind: ActionKind
    target: Optional[str] = None
    text: Optional[str] = None
    success: bool
    timestamp: float = Field(default_factory=now_utc_timestamp)


class ControllerSettings(BaseModel):
    navigate_settle_seconds: float = Field(3.0, ge=0.0, description='Wait after starting a navigation.')
    click_settle_seconds: float = Field(0.5, ge=0.0, description='Wait after scrolling to and after clicking an element.')
    type_char_delay_seconds: float = Field(0.05, ge=0.0, description='Pause between typed characters.')
    type_settle_seconds: float = Field(0.2, ge=0.0, description='Wait after the final change event.')
    max_text_length: int = Field(5000, ge=1, description='Maximum characters returned by read_text.')
    summary_item_limit: int = Field(10, ge=0, description='Headings/buttons/links/inputs kept in the page summary.')
    element_text_preview: int = Field(50, ge=0, description='Characters of the clicked element text reported back.')
    action_log_size: int = Field(50, ge=1, description='Entries kept in the diagnostic action log.')
