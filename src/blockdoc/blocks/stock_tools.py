"""Stock block tools.

Paragraph, header, list, code and delimiter tools covering the common
text block types. Each keeps its data in ``self.data`` and renders a small
HTML fragment as its surface content.
"""

from __future__ import annotations

import html
from typing import Any

from .models import Surface
from .tools import BlockTool, ToolRegistry

INLINE_FORMATTING = {
    "b": True,
    "strong": True,
    "i": True,
    "em": True,
    "u": True,
    "code": True,
    "br": True,
    "a": {"href": True},
}


class ParagraphTool(BlockTool):
    """Plain text paragraph. Default tool of the editor."""

    conversion_config = {"export": "text", "import": "text"}
    sanitize = INLINE_FORMATTING
    toolbox = {"title": "Text", "icon": "¶"}

    def render_surface(self) -> Surface:
        return Surface(tool_name="paragraph", content=f"<p>{self.data.get('text', '')}</p>")

    def set_text(self, text: str) -> None:
        self.data["text"] = text

    def merge(self, data: dict[str, Any]) -> None:
        """Append another paragraph's text to this one."""
        self.data["text"] = self.data.get("text", "") + data.get("text", "")


class HeaderTool(BlockTool):
    """Heading with a level between 1 and 6."""

    conversion_config = {"export": "text", "import": "text"}
    sanitize: dict[str, Any] = {}
    toolbox = {"title": "Heading", "icon": "H"}

    DEFAULT_LEVEL = 2

    def __init__(self, data: dict[str, Any], config: dict[str, Any]) -> None:
        super().__init__(data, config)
        self.data.setdefault("text", "")
        self.data["level"] = self._clamp(
            self.data.get("level", self.config.get("default_level", self.DEFAULT_LEVEL))
        )

    def render_surface(self) -> Surface:
        level = self.data["level"]
        return Surface(tool_name="header", content=f"<h{level}>{self.data['text']}</h{level}>")

    def set_level(self, level: int) -> int:
        self.data["level"] = self._clamp(level)
        return self.data["level"]

    @staticmethod
    def _clamp(level: Any) -> int:
        try:
            value = int(level)
        except (TypeError, ValueError):
            return HeaderTool.DEFAULT_LEVEL
        return max(1, min(6, value))


def _export_list(data: dict[str, Any]) -> str:
    return "\n".join(str(item) for item in data.get("items", []))


def _import_list(text: str) -> dict[str, Any]:
    items = [line for line in text.split("\n") if line.strip()]
    return {"style": "unordered", "items": items}


class ListTool(BlockTool):
    """Ordered or unordered list of text items."""

    conversion_config = {"export": _export_list, "import": _import_list}
    sanitize = INLINE_FORMATTING
    toolbox = {"title": "List", "icon": "•"}

    def __init__(self, data: dict[str, Any], config: dict[str, Any]) -> None:
        super().__init__(data, config)
        self.data.setdefault("style", self.config.get("default_style", "unordered"))
        self.data["items"] = list(self.data.get("items", []))

    def render_surface(self) -> Surface:
        tag = "ol" if self.data["style"] == "ordered" else "ul"
        items = "".join(f"<li>{item}</li>" for item in self.data["items"])
        return Surface(tool_name="list", content=f"<{tag}>{items}</{tag}>")

    def append_item(self, text: str) -> int:
        self.data["items"].append(text)
        return len(self.data["items"])


class CodeTool(BlockTool):
    """Preformatted source code, optionally tagged with a language."""

    conversion_config = {"export": "code", "import": "code"}
    toolbox = {"title": "Code", "icon": "</>"}

    def render_surface(self) -> Surface:
        code = html.escape(self.data.get("code", ""))
        return Surface(tool_name="code", content=f"<pre><code>{code}</code></pre>")

    def set_language(self, language: str | None) -> None:
        if language:
            self.data["language"] = language
        else:
            self.data.pop("language", None)


class DelimiterTool(BlockTool):
    """Visual separator. Carries no data and does not convert."""

    toolbox = {"title": "Delimiter", "icon": "***"}

    def render_surface(self) -> Surface:
        return Surface(tool_name="delimiter", content="<hr>")

    def save(self) -> dict[str, Any]:
        return {}


STOCK_TOOLS: dict[str, type[BlockTool]] = {
    "paragraph": ParagraphTool,
    "header": HeaderTool,
    "list": ListTool,
    "code": CodeTool,
    "delimiter": DelimiterTool,
}


def register_stock_tools(registry: ToolRegistry) -> ToolRegistry:
    for name, tool_class in STOCK_TOOLS.items():
        registry.register(name, tool_class)
    return registry
