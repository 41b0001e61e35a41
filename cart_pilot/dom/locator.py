"""
Locator parsing and resolution.

Site markup is rarely attribute-stable, so planners often address elements by
their visible text. ``base:contains("text") descendant`` is parsed into an
explicit ``Locator`` and resolved against element handles; plain CSS selectors
pass straight through to ``query_selector_all``.
"""
from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

_CONTAINS_RE = re.compile(r'^(?P<base>.*?):contains\((?P<quote>["\'])(?P<text>.+?)(?P=quote)\)(?P<rest>.*)$', re.DOTALL)
_WHITESPACE_RE = re.compile(r'\s+')


class Locator(BaseModel):
    model_config = ConfigDict(frozen=True)

    selector: str
    text: Optional[str] = None
    within: Optional[str] = None

    def __str__(self) -> str:
        if self.text is None:
            return self.selector
        rendered = f'{self.selector}:contains("{self.text}")'
        if self.within:
            rendered += f' {self.within}'
        return rendered


def normalize_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace and trim."""
    return _WHITESPACE_RE.sub(' ', text or '').strip()


def parse_locator(raw: str) -> Locator:
    raw = (raw or '').strip()
    match = _CONTAINS_RE.match(raw)
    if not match:
        return Locator(selector=raw or 'body')
    base = match.group('base').strip() or '*'
    rest = match.group('rest').strip() or None
    return Locator(selector=base, text=match.group('text'), within=rest)


async def _text_of(element: Any) -> str:
    return (await element.text_content()) or ''


async def resolve_all(root: Any, locator: Locator | str) -> list[Any]:
    """Return every element handle matching ``locator`` under ``root`` (a page, frame or element)."""
    if isinstance(locator, str):
        locator = parse_locator(locator)

    candidates = await root.query_selector_all(locator.selector)
    if locator.text is None:
        return list(candidates)

    matches = []
    for element in candidates:
        if locator.text not in await _text_of(element):
            continue
        if locator.within:
            matches.extend(await element.query_selector_all(locator.within))
        else:
            matches.append(element)
    return matches


async def resolve_first(root: Any, locator: Locator | str) -> Optional[Any]:
    """First match in document order, or None."""
    if isinstance(locator, str):
        locator = parse_locator(locator)

    if locator.text is None:
        return await root.query_selector(locator.selector)

    for element in await root.query_selector_all(locator.selector):
        if locator.text not in await _text_of(element):
            continue
        if locator.within:
            nested = await element.query_selector(locator.within)
            if nested is not None:
                return nested
            continue
        return element
    return None
