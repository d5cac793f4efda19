"""Blocks API - public facade over the block collection.

This is the surface external callers use. It holds no state of its own;
document policies live here rather than in the collection:
- Deleting the last block re-seeds one default-tool block
- After a delete the caret moves to the current block (index 0) or the
  previous one
- Stretching a missing block is a logged no-op
- A render that fails part way still leaves one default block
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from .blocks.collection import BlockCollection
from .blocks.models import Block, BlockInfo, OutputData, Surface
from .errors import IndexOutOfRangeError, UnknownMethodError

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    async def render(self, blocks_data: list[dict[str, Any]]) -> Any:
        ...


class PasteProcessor(Protocol):
    async def process_text(self, text: str, replace_current: bool = False) -> Any:
        ...


class Caret(Protocol):
    def set_to_block(self, block: Block) -> None:
        ...

    def navigate_previous(self, force: bool = False) -> None:
        ...


class Toolbar(Protocol):
    def close(self) -> None:
        ...

    def move(self, force: bool = False) -> None:
        ...


BlockInfoListener = Callable[[BlockInfo], None]


class BlocksAPI:
    """Stable block operations for editor-wide API consumers."""

    def __init__(
        self,
        collection: BlockCollection,
        renderer: Renderer,
        paste_processor: PasteProcessor,
        *,
        caret: Caret | None = None,
        toolbar: Toolbar | None = None,
    ) -> None:
        self._collection = collection
        self._renderer = renderer
        self._paste = paste_processor
        self._caret = caret
        self._toolbar = toolbar

    @property
    def methods(self) -> dict[str, Callable[..., Any]]:
        """Public method table."""
        return {
            "clear": self.clear,
            "render": self.render,
            "render_from_html": self.render_from_html,
            "delete": self.delete,
            "swap": self.swap,
            "get_block_by_index": self.get_block_by_index,
            "get_current_block_index": self.get_current_block_index,
            "get_blocks_count": self.get_blocks_count,
            "stretch_block": self.stretch_block,
            "insert_new_block": self.insert_new_block,
            "insert": self.insert,
            "insert_adjacent_by_key": self.insert_adjacent_by_key,
            "replace_by_key": self.replace_by_key,
            "call_method_by_key": self.call_method_by_key,
            "get_index_by_key": self.get_index_by_key,
            "on_current_block_change": self.on_current_block_change,
        }

    # =========================================================================
    # Queries
    # =========================================================================

    def get_blocks_count(self) -> int:
        return len(self._collection)

    def get_current_block_index(self) -> int | None:
        return self._collection.current_index

    def get_block_by_index(self, index: int) -> Surface:
        """Return the rendered surface of the block at ``index``."""
        return self._collection.get_block_by_index(index).surface

    def get_index_by_key(self, key: str) -> int:
        return self._collection.get_index_by_key(key)

    # =========================================================================
    # Mutations
    # =========================================================================

    def clear(self) -> None:
        """Empty the document, leaving one default block."""
        self._collection.clear(insert_default=True)
        self._close_toolbar()

    async def render(self, output_data: OutputData | dict[str, Any]) -> None:
        """Replace the document with saved data."""
        if not isinstance(output_data, OutputData):
            output_data = OutputData.from_dict(output_data)
        self._collection.clear()
        try:
            await self._renderer.render(output_data.blocks)
        finally:
            self._ensure_not_empty()

    async def render_from_html(self, html: str) -> None:
        """Replace the document with blocks parsed from pasted content."""
        self._collection.clear()
        try:
            await self._paste.process_text(html, True)
        finally:
            self._ensure_not_empty()

    def delete(self, index: int | None = None) -> None:
        """Remove a block (default: current) and re-focus.

        Raises:
            IndexOutOfRangeError: If index is out of bounds.
        """
        self._collection.remove_block(index)
        self._ensure_not_empty()

        if self._caret is not None:
            if self._collection.current_index == 0:
                self._caret.set_to_block(self._collection.current_block)
            else:
                self._caret.navigate_previous(True)

        self._close_toolbar()

    def swap(self, from_index: int, to_index: int) -> None:
        """Exchange two blocks and reposition the toolbar."""
        self._collection.swap(from_index, to_index)
        if self._toolbar is not None:
            self._toolbar.move(False)

    def stretch_block(self, index: int, status: bool = True) -> None:
        """Set the stretched flag. A missing index is ignored."""
        try:
            block = self._collection.get_block_by_index(index)
        except IndexOutOfRangeError:
            logger.warning("stretch_block: no block at index %s", index)
            return
        block.stretched = status

    def insert(
        self,
        tool_name: str | None = None,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
        index: int | None = None,
        focus: bool = False,
    ) -> str:
        """Insert a block and return its key."""
        block = self._collection.insert(tool_name, data or {}, config or {}, index, focus)
        return block.key

    def insert_new_block(self) -> str:
        """Insert a default block after the current one.

        Deprecated: use insert().
        """
        logger.warning(
            "BlocksAPI.insert_new_block() is deprecated and will be removed; use insert() instead"
        )
        return self.insert()

    def insert_adjacent_by_key(
        self,
        tool_name: str | None,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
        key: str | None = None,
        after: bool = True,
    ) -> str:
        """Insert before/after the block with ``key`` and return the new key."""
        block = self._collection.insert_adjacent_by_key(tool_name, data, config, key, after)
        return block.key

    def replace_by_key(
        self,
        key: str,
        tool_name: str,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
    ) -> str:
        """Replace a block and return the key of the replacement."""
        return self._collection.replace_by_key(key, tool_name, data, config).key

    def call_method_by_key(self, key: str, method: str, *args: Any, **kwargs: Any) -> Any:
        """Call a public method on the tool instance of a block.

        Raises:
            KeyNotFoundError: If key is not present.
            UnknownMethodError: If the tool has no public callable ``method``.
        """
        block = self._collection.get_block_by_key(key)
        target = None if method.startswith("_") else getattr(block.tool, method, None)
        if not callable(target):
            raise UnknownMethodError(
                f"Cannot call {method} of block {block.tool_name} {block.key}",
                key=key,
                method=method,
            )
        return target(*args, **kwargs)

    def on_current_block_change(self, callback: BlockInfoListener | None) -> None:
        """Subscribe to current-block changes.

        External callers receive the block handle (key and surface), not the
        Block itself. Registering replaces the previous listener.
        """
        if callback is None:
            self._collection.on_current_block_change(None)
            return
        self._collection.on_current_block_change(lambda block: callback(block.info))

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_not_empty(self) -> None:
        if len(self._collection) == 0:
            self._collection.insert(self._collection.default_tool, {}, {}, index=0, focus=True)

    def _close_toolbar(self) -> None:
        if self._toolbar is not None:
            self._toolbar.close()
