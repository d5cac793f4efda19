"""Paste processor: text and Markdown -> blocks.

Parses pasted text with mistletoe and inserts one block per top-level
token. Inline formatting is rendered to HTML and cleaned against the
receiving tool's sanitizer rules. Raw HTML blocks are split on block-level
closing tags and pasted as default-tool paragraphs.
"""

from __future__ import annotations

import inspect
import logging
import re
from typing import Any

from mistletoe import Document
from mistletoe.block_token import (
    BlockCode,
    CodeFence,
    Heading,
    HTMLBlock,
    List,
    ListItem,
    Paragraph,
    SetextHeading,
    ThematicBreak,
)
from mistletoe.html_renderer import HTMLRenderer

from .collection import BlockCollection
from .models import Block
from .sanitizer import Sanitizer

logger = logging.getLogger(__name__)

_HTML_BLOCK_SPLIT = re.compile(r"</(?:p|div|h[1-6]|li|blockquote|pre)\s*>|<br\s*/?>", re.IGNORECASE)


class MarkdownPasteProcessor:
    """Turn pasted text into blocks of the registered tools."""

    def __init__(self, collection: BlockCollection, sanitizer: Sanitizer) -> None:
        self._collection = collection
        self._sanitizer = sanitizer

    async def process_text(self, text: str, replace_current: bool = False) -> list[Block]:
        """Parse ``text`` and insert the resulting blocks after the current one.

        Args:
            text: Pasted text (Markdown, plain text or simple HTML).
            replace_current: Replace the current block with the first pasted
                block instead of inserting after it.

        Returns:
            Blocks inserted, in document order.
        """
        entries = await self._parse(text)
        inserted: list[Block] = []
        for position, (tool_name, data) in enumerate(entries):
            current = self._collection.current_block
            if position == 0 and replace_current and current is not None:
                block = self._collection.replace_by_key(current.key, tool_name, data, {})
            else:
                index = len(self._collection)
                if current is not None:
                    index = self._collection.current_index + 1
                block = self._collection.insert(tool_name, data, {}, index=index)
            self._collection.current_index = self._collection.get_index_by_key(block.key)
            inserted.append(block)

        logger.debug("Pasted %d blocks", len(inserted))
        return inserted

    async def _parse(self, text: str) -> list[tuple[str, dict[str, Any]]]:
        entries: list[tuple[str, dict[str, Any]]] = []
        # The renderer context registers the HTML block/span tokens
        with HTMLRenderer() as renderer:
            doc = Document(text)
            for token in doc.children:
                entries.extend(await self._convert_token(token, renderer))
        return entries

    async def _convert_token(
        self,
        token: Any,
        renderer: HTMLRenderer,
    ) -> list[tuple[str, dict[str, Any]]]:
        """Convert a mistletoe block token to (tool, data) entries."""
        if isinstance(token, (Heading, SetextHeading)):
            text = renderer.render_inner(token)
            if self._has_tool("header"):
                return [("header", {"text": await self._clean(text, "header"), "level": token.level})]
            return [await self._paragraph(text)]

        if isinstance(token, Paragraph):
            return [await self._paragraph(renderer.render_inner(token))]

        if isinstance(token, (BlockCode, CodeFence)):
            return [self._code(token)]

        if isinstance(token, List):
            return await self._list(token, renderer)

        if isinstance(token, ThematicBreak):
            if self._has_tool("delimiter"):
                return [("delimiter", {})]
            return []

        if isinstance(token, HTMLBlock):
            entries = []
            for chunk in _HTML_BLOCK_SPLIT.split(token.content):
                entry = await self._paragraph(chunk)
                if entry[1]["text"].strip():
                    entries.append(entry)
            return entries

        # Unknown token type - keep whatever text it renders to
        if hasattr(token, "children"):
            text = renderer.render_inner(token)
            if text.strip():
                return [await self._paragraph(text)]
        return []

    async def _paragraph(self, text: str) -> tuple[str, dict[str, Any]]:
        tool_name = self._collection.default_tool
        return tool_name, {"text": (await self._clean(text, tool_name)).strip()}

    def _code(self, token: BlockCode | CodeFence) -> tuple[str, dict[str, Any]]:
        content = ""
        if token.children:
            content = token.children[0].content
        content = content.rstrip("\n")

        if not self._has_tool("code"):
            return self._collection.default_tool, {"text": content}

        data: dict[str, Any] = {"code": content}
        language = getattr(token, "language", None)
        if language:
            data["language"] = language
        return "code", data

    async def _list(
        self,
        token: List,
        renderer: HTMLRenderer,
    ) -> list[tuple[str, dict[str, Any]]]:
        is_ordered = token.start is not None
        items = []
        for item in token.children:
            if not isinstance(item, ListItem):
                continue
            text = "".join(
                renderer.render_inner(child)
                for child in item.children
                if isinstance(child, Paragraph)
            )
            items.append(text)

        if self._has_tool("list"):
            cleaned = [await self._clean(item, "list") for item in items]
            return [("list", {"style": "ordered" if is_ordered else "unordered", "items": cleaned})]
        return [await self._paragraph(item) for item in items]

    def _has_tool(self, name: str) -> bool:
        return self._collection.registry.is_block_tool(name)

    async def _clean(self, text: str, tool_name: str) -> str:
        rules = self._collection.registry.get_tool_class(tool_name).sanitize_rules
        cleaned = self._sanitizer.clean(text, rules)
        if inspect.isawaitable(cleaned):
            cleaned = await cleaned
        return cleaned
