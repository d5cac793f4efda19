"""Editor composition root.

Wires the tool registry, collection, conversion, render/save and paste
components behind one object and seeds the document with a default block.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .api import BlocksAPI, Caret, Toolbar
from .blocks.collection import BlockCollection
from .blocks.conversion import ConversionCoordinator
from .blocks.models import Block, OutputData
from .blocks.paste import MarkdownPasteProcessor
from .blocks.renderer import Renderer, Saver
from .blocks.sanitizer import HTMLSanitizer, Sanitizer
from .blocks.stock_tools import register_stock_tools
from .blocks.tools import ToolRegistry
from .errors import UnknownToolError
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class BlockEditor:
    """A block document with its tools and public API."""

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        *,
        sanitizer: Sanitizer | None = None,
        settings: Settings | None = None,
        key_factory: Callable[[], str] | None = None,
        caret: Caret | None = None,
        toolbar: Toolbar | None = None,
    ) -> None:
        self.settings = settings or default_settings

        if registry is None:
            registry = ToolRegistry()
            if self.settings.include_stock_tools:
                register_stock_tools(registry)
        if not registry.is_block_tool(self.settings.default_tool):
            raise UnknownToolError(
                f"Default tool is not a registered block tool: {self.settings.default_tool}",
                tool_name=self.settings.default_tool,
            )

        self.registry = registry
        self.sanitizer = sanitizer or HTMLSanitizer()
        self.collection = BlockCollection(registry, settings=self.settings, key_factory=key_factory)
        self.conversion = ConversionCoordinator(self.collection, registry, self.sanitizer)
        self.renderer = Renderer(self.collection)
        self.saver = Saver(self.collection)
        self.paste = MarkdownPasteProcessor(self.collection, self.sanitizer)
        self.blocks = BlocksAPI(
            self.collection,
            self.renderer,
            self.paste,
            caret=caret,
            toolbar=toolbar,
        )

        self.collection.clear(insert_default=True)
        logger.debug("Editor ready with %d tools", len(registry))

    async def save(self) -> dict[str, Any]:
        """Persisted document: {"time", "blocks": [{"tool_name", "data"}], "version"}."""
        output = await self.saver.save()
        return output.to_dict()

    async def load(self, document: OutputData | dict[str, Any]) -> None:
        await self.blocks.render(document)

    async def convert(self, key: str, target_tool: str) -> Block:
        """Convert the block with ``key`` into ``target_tool``."""
        block = self.collection.get_block_by_key(key)
        return await self.conversion.convert(block, target_tool)
