"""Block conversion between tool types.

Conversion runs export -> sanitize -> import -> replace:

1. Both tools must declare export and import (ConversionUnsupportedError)
2. The source block is saved and the target tool's export turns the saved
   data into one string
3. The string is cleaned with the target tool's sanitizer rules
4. The target tool's import turns the clean string into the new payload
5. The collection replaces the source block by key

The source key is resolved once on entry and again by replace_by_key at
application time. A block removed while save or sanitize was suspended
surfaces as KeyNotFoundError; nothing is mutated in that case.
"""

from __future__ import annotations

import inspect
import logging

from ..errors import ConversionUnsupportedError
from .collection import BlockCollection
from .models import Block
from .sanitizer import Sanitizer
from .tools import ToolRegistry

logger = logging.getLogger(__name__)


class ConversionCoordinator:
    """Converts blocks between tools and keeps the conversion affordance state.

    ``opened`` and ``focused_index`` only describe the conversion picker;
    they are not document state.
    """

    def __init__(
        self,
        collection: BlockCollection,
        registry: ToolRegistry,
        sanitizer: Sanitizer,
    ) -> None:
        self._collection = collection
        self._registry = registry
        self._sanitizer = sanitizer
        self.opened = False
        self.focused_index = -1

    # =========================================================================
    # Conversion Pipeline
    # =========================================================================

    async def convert(self, source_block: Block, target_tool_name: str) -> Block:
        """Convert ``source_block`` into a block of ``target_tool_name``.

        Identical source and target tools still run the whole pipeline.

        Returns:
            The replacement Block (with a new key).

        Raises:
            ConversionUnsupportedError: If either tool lacks export or import.
            KeyNotFoundError: If the source block is not (or no longer) in
                the collection.
        """
        key = source_block.key
        self._collection.get_index_by_key(key)

        source_spec = self._registry.get_tool_class(source_block.tool_name)
        target_spec = self._registry.get_tool_class(target_tool_name)
        if target_spec.conversion is None:
            raise ConversionUnsupportedError(
                f"Tool {target_tool_name} does not declare both export and import",
                source_tool=source_block.tool_name,
                target_tool=target_tool_name,
                reason="target",
            )
        if source_spec.conversion is None:
            raise ConversionUnsupportedError(
                f"Tool {source_block.tool_name} does not declare both export and import",
                source_tool=source_block.tool_name,
                target_tool=target_tool_name,
                reason="source",
            )

        saved = await source_block.save()
        exported = target_spec.conversion.export(saved.data)

        cleaned = self._sanitizer.clean(exported, target_spec.sanitize_rules)
        if inspect.isawaitable(cleaned):
            cleaned = await cleaned

        new_data = target_spec.conversion.import_(cleaned or "")

        block = self._collection.replace_by_key(key, target_tool_name, new_data, {})
        logger.debug(
            "Converted %s (%s) into %s (%s)",
            key,
            source_block.tool_name,
            block.key,
            target_tool_name,
        )
        return block

    # =========================================================================
    # Conversion Picker State
    # =========================================================================

    def targets(self) -> list[str]:
        """Tool names offered in the picker."""
        return self._registry.conversion_targets()

    def handle_showing_event(self) -> bool:
        """Open the picker for the current block, or close it if there is none."""
        current = self._collection.current_block
        if current is None:
            self.close()
            return False
        targets = self.targets()
        if current.tool_name in targets:
            self.focused_index = targets.index(current.tool_name)
        self.open()
        return True

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.opened = False
        self.drop_focused_button()

    def leaf(self, direction: str = "right") -> int:
        """Move the focused candidate one step, wrapping around."""
        targets = self.targets()
        if not targets:
            self.focused_index = -1
            return self.focused_index
        if direction == "left":
            if self.focused_index <= 0:
                self.focused_index = len(targets) - 1
            else:
                self.focused_index -= 1
        else:
            self.focused_index = (self.focused_index + 1) % len(targets)
        return self.focused_index

    @property
    def focused_tool(self) -> str | None:
        targets = self.targets()
        if 0 <= self.focused_index < len(targets):
            return targets[self.focused_index]
        return None

    def drop_focused_button(self) -> None:
        self.focused_index = -1

    async def replace_with_block(self, tool_name: str) -> Block:
        """Convert the current block and close the picker."""
        current = self._collection.current_block
        if current is None:
            self.close()
            raise ConversionUnsupportedError(
                "There is no current block to convert",
                target_tool=tool_name,
                reason="no_current_block",
            )
        try:
            return await self.convert(current, tool_name)
        finally:
            self.close()
