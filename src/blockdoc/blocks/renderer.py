"""Bulk render and save of a whole document."""

from __future__ import annotations

import logging
import time
from typing import Any

from .._version import __version__
from .collection import BlockCollection
from .models import OutputData

logger = logging.getLogger(__name__)


class Renderer:
    """Rebuild the collection from saved block entries."""

    def __init__(self, collection: BlockCollection) -> None:
        self._collection = collection

    async def render(self, blocks_data: list[dict[str, Any]]) -> int:
        """Append one block per entry, in order.

        Entries naming a tool that is not a registered block tool are
        logged and skipped.

        Returns:
            Number of blocks inserted.
        """
        registry = self._collection.registry
        inserted = 0
        for entry in blocks_data:
            tool_name = entry.get("tool_name") or entry.get("toolName") or entry.get("type")
            if not tool_name or not registry.is_block_tool(tool_name):
                logger.warning("Skipping saved block with unknown tool %r", tool_name)
                continue
            self._collection.insert(
                tool_name,
                dict(entry.get("data") or {}),
                {},
                index=len(self._collection),
            )
            inserted += 1
        return inserted


class Saver:
    """Collect every block's saved data in document order."""

    def __init__(self, collection: BlockCollection) -> None:
        self._collection = collection

    async def save(self) -> OutputData:
        blocks = []
        for block in self._collection.blocks:
            saved = await block.save()
            blocks.append(saved.to_dict())
        return OutputData(
            blocks=blocks,
            time=int(time.time() * 1000),
            version=__version__,
        )
