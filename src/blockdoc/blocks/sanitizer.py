"""Sanitizer collaborator.

Text crossing a tool boundary (conversion, paste) is cleaned against the
receiving tool's rules. Rules map a lowercase tag name to:

- ``True``: keep the tag and all of its attributes
- a dict: keep the tag with only the attributes mapped to ``True``
- ``False`` or absent: drop the tag, keep its text

Content of ``script`` and ``style`` elements is always dropped.
"""

from __future__ import annotations

import html
from collections.abc import Awaitable
from html.parser import HTMLParser
from typing import Any, Protocol

DROP_CONTENT_TAGS = frozenset({"script", "style"})
VOID_TAGS = frozenset({"br", "hr", "img", "wbr"})


class Sanitizer(Protocol):
    def clean(self, text: str, rules: dict[str, Any]) -> str | Awaitable[str]:
        ...


class HTMLSanitizer:
    """Default sanitizer built on the standard library HTML parser."""

    def clean(self, text: str, rules: dict[str, Any]) -> str:
        if not text:
            return ""
        parser = _CleaningParser(rules or {})
        parser.feed(text)
        parser.close()
        return parser.output()


class _CleaningParser(HTMLParser):
    def __init__(self, rules: dict[str, Any]) -> None:
        super().__init__(convert_charrefs=True)
        self._rules = {str(k).lower(): v for k, v in rules.items()}
        self._parts: list[str] = []
        self._open: list[str] = []
        self._dropping = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping += 1
            return
        if self._dropping:
            return
        rule = self._rules.get(tag, False)
        if not _allowed(rule):
            return
        self._parts.append(self._render_start(tag, attrs, rule))
        if tag not in VOID_TAGS:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._dropping or tag in DROP_CONTENT_TAGS:
            return
        rule = self._rules.get(tag, False)
        if _allowed(rule):
            self._parts.append(self._render_start(tag, attrs, rule))

    def handle_endtag(self, tag: str) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping = max(0, self._dropping - 1)
            return
        if self._dropping or tag not in self._open:
            return
        # Close anything left open inside this element first
        while self._open:
            open_tag = self._open.pop()
            self._parts.append(f"</{open_tag}>")
            if open_tag == tag:
                break

    def handle_data(self, data: str) -> None:
        if not self._dropping:
            self._parts.append(html.escape(data, quote=False))

    def output(self) -> str:
        closing = "".join(f"</{tag}>" for tag in reversed(self._open))
        return "".join(self._parts) + closing

    @staticmethod
    def _render_start(tag: str, attrs: list[tuple[str, str | None]], rule: Any) -> str:
        if rule is True:
            kept = attrs
        elif isinstance(rule, dict):
            kept = [(name, value) for name, value in attrs if rule.get(name) is True]
        else:
            kept = []
        rendered = "".join(
            f' {name}="{html.escape(value or "", quote=True)}"' for name, value in kept
        )
        return f"<{tag}{rendered}>"


def _allowed(rule: Any) -> bool:
    return rule is True or isinstance(rule, dict)
