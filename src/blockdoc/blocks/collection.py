"""Block collection manager.

The ordered block sequence is the arena; ``_key_index`` is a secondary
index from block key to position. Every structural mutation patches the
index before returning, so index and key addressing always resolve to the
same Block object.

Addressing:
- Index: primary mode for sequential UI interaction (insert, swap, remove)
- Key: stable mode for deferred work that resolves after indices shift

The current-block pointer is index based. Swapping or inserting around it
does not move it; only explicit reassignment notifies the listener.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any
from uuid import uuid4

from ..errors import IndexOutOfRangeError, KeyGenerationError, KeyNotFoundError
from ..settings import Settings, settings as default_settings
from .models import Block
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

CurrentBlockListener = Callable[[Block], None]


class BlockCollection:
    """Ordered, key-addressable collection of blocks."""

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        settings: Settings | None = None,
        key_factory: Callable[[], str] | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or default_settings
        self._key_factory = key_factory or self._new_key
        self._blocks: list[Block] = []
        self._key_index: dict[str, int] = {}
        self._current_index: int | None = None
        # Every key handed out this session; removed keys are never reissued
        self._issued_keys: set[str] = set()

        # Single subscriber by contract: registering replaces the previous one
        self.current_block_listener: CurrentBlockListener | None = None

    # =========================================================================
    # Queries
    # =========================================================================

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(tuple(self._blocks))

    @property
    def length(self) -> int:
        return len(self._blocks)

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._blocks)

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def default_tool(self) -> str:
        return self._settings.default_tool

    def keys(self) -> list[str]:
        """Block keys in document order."""
        return [block.key for block in self._blocks]

    def key_index(self) -> dict[str, int]:
        """Snapshot of the key -> position index."""
        return dict(self._key_index)

    def get_block_by_index(self, index: int) -> Block:
        self._check_index(index)
        return self._blocks[index]

    def get_index_by_key(self, key: str) -> int:
        """Resolve a key to its current position.

        Raises:
            KeyNotFoundError: If no block in the collection has this key.
        """
        try:
            return self._key_index[key]
        except KeyError:
            raise KeyNotFoundError(f"Block not found: {key}", key=key) from None

    def get_block_by_key(self, key: str) -> Block:
        return self._blocks[self.get_index_by_key(key)]

    @property
    def current_index(self) -> int | None:
        return self._current_index

    @current_index.setter
    def current_index(self, index: int) -> None:
        self._check_index(index)
        self._set_current(index)

    @property
    def current_block(self) -> Block | None:
        if self._current_index is None:
            return None
        return self._blocks[self._current_index]

    def on_current_block_change(self, callback: CurrentBlockListener | None) -> None:
        """Install the current-block listener, replacing any previous one."""
        self.current_block_listener = callback

    # =========================================================================
    # Structural Mutations
    # =========================================================================

    def insert(
        self,
        tool_name: str | None = None,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
        index: int | None = None,
        focus: bool = False,
    ) -> Block:
        """Construct a block and insert it.

        Args:
            tool_name: Block tool name (default tool if None).
            data: Initial tool data.
            config: Tool config, merged over the registry config.
            index: Target position, 0..length (default: after the current
                block, or at the end when there is none).
            focus: Make the new block current.

        Returns:
            The inserted Block.

        Raises:
            UnknownToolError: If tool_name is not a registered block tool.
            IndexOutOfRangeError: If index is outside 0..length.
        """
        if index is None:
            index = len(self._blocks) if self._current_index is None else self._current_index + 1
        elif index < 0 or index > len(self._blocks):
            raise IndexOutOfRangeError(
                f"Cannot insert at {index}: collection has {len(self._blocks)} blocks",
                index=index,
                length=len(self._blocks),
            )

        block = self._compose_block(tool_name or self.default_tool, data, config)

        self._blocks.insert(index, block)
        self._reindex_from(index)
        logger.debug("Inserted %s (%s) at %d", block.key, block.tool_name, index)

        if focus or self._current_index is None:
            self._set_current(index)
        return block

    def insert_adjacent_by_key(
        self,
        tool_name: str | None,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
        key: str | None = None,
        after: bool = True,
    ) -> Block:
        """Insert next to the block with ``key`` (or the current block).

        Raises:
            KeyNotFoundError: If key is given and not present.
        """
        if key is not None:
            anchor = self.get_index_by_key(key)
        elif self._current_index is not None:
            anchor = self._current_index
        else:
            return self.insert(tool_name, data, config, index=0)

        index = anchor + 1 if after else anchor
        return self.insert(tool_name, data, config, index=index)

    def remove_block(self, index: int | None = None) -> None:
        """Remove the block at ``index`` (default: current) and release it.

        Leaving the collection empty is allowed here; re-seeding is the
        caller's policy.

        Raises:
            IndexOutOfRangeError: If index is out of bounds or there is no
                current block to default to.
        """
        if index is None:
            if self._current_index is None:
                raise IndexOutOfRangeError("No current block to remove", length=0)
            index = self._current_index
        self._check_index(index)

        previous = self.current_block
        block = self._blocks.pop(index)
        del self._key_index[block.key]
        self._reindex_from(index)
        logger.debug("Removed %s at %d", block.key, index)

        if not self._blocks:
            self._current_index = None
        else:
            current = self._current_index
            if current is not None and current >= index:
                current -= 1
            if current is None or current < 0:
                current = 0
            self._current_index = current
            self._notify_if_changed(previous)

        # Tool hooks run last: a failing destroy() cannot leave stale indices
        block.release()

    def swap(self, from_index: int, to_index: int) -> None:
        """Exchange two blocks; the current index keeps its numeric value."""
        self._check_index(from_index)
        self._check_index(to_index)
        if from_index == to_index:
            return

        blocks = self._blocks
        blocks[from_index], blocks[to_index] = blocks[to_index], blocks[from_index]
        self._key_index[blocks[from_index].key] = from_index
        self._key_index[blocks[to_index].key] = to_index
        logger.debug("Swapped %d <-> %d", from_index, to_index)

    def replace_by_key(
        self,
        key: str,
        tool_name: str,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
    ) -> Block:
        """Replace the block with ``key`` by a new block at the same index.

        The new block gets a new key. Construction happens before anything
        is touched, so a failure leaves the collection unchanged.

        Raises:
            KeyNotFoundError: If key is not present.
            UnknownToolError: If tool_name is not a registered block tool.
        """
        index = self.get_index_by_key(key)
        block = self._compose_block(tool_name, data, config)

        old = self._blocks[index]
        self._blocks[index] = block
        del self._key_index[old.key]
        self._key_index[block.key] = index
        old.release()
        logger.debug("Replaced %s with %s (%s) at %d", old.key, block.key, tool_name, index)
        return block

    def clear(self, insert_default: bool = False) -> None:
        """Release and drop every block.

        With ``insert_default`` a default-tool block is inserted right away,
        so outside callers never observe an empty document.
        """
        blocks = self._blocks
        self._blocks = []
        self._key_index = {}
        self._current_index = None
        failures: list[Exception] = []
        for block in blocks:
            try:
                block.release()
            except Exception as exc:
                logger.exception("Releasing %s failed", block.key)
                failures.append(exc)
        logger.debug("Cleared %d blocks", len(blocks))

        if insert_default:
            self.insert(self.default_tool, {}, {}, index=0, focus=True)
        if failures:
            raise failures[0]

    # =========================================================================
    # Internals
    # =========================================================================

    def _compose_block(
        self,
        tool_name: str,
        data: dict[str, Any] | None,
        config: dict[str, Any] | None,
    ) -> Block:
        payload = dict(data or {})
        tool = self._registry.create_tool_instance(tool_name, payload, config or {})
        return Block(self._generate_key(), tool_name, payload, tool)

    def _generate_key(self) -> str:
        attempts = self._settings.key_attempts
        for _ in range(attempts):
            key = self._key_factory()
            if key not in self._issued_keys:
                self._issued_keys.add(key)
                return key
        raise KeyGenerationError(
            f"Could not generate a unique block key after {attempts} attempts",
            attempts=attempts,
        )

    def _new_key(self) -> str:
        return f"{self._settings.key_prefix}-{uuid4().hex[:12]}"

    def _reindex_from(self, start: int) -> None:
        for position in range(start, len(self._blocks)):
            self._key_index[self._blocks[position].key] = position

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise IndexOutOfRangeError(f"Block index must be an int, got {index!r}")
        if index < 0 or index >= len(self._blocks):
            raise IndexOutOfRangeError(
                f"Block index {index} out of range (length {len(self._blocks)})",
                index=index,
                length=len(self._blocks),
            )

    def _set_current(self, index: int) -> None:
        previous = self.current_block
        self._current_index = index
        self._notify_if_changed(previous)

    def _notify_if_changed(self, previous: Block | None) -> None:
        current = self.current_block
        if current is None or current is previous:
            return
        if self.current_block_listener is not None:
            self.current_block_listener(current)
