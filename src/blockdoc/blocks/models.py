"""Data models for the block document.

This module defines the block entity, the rendered surface a block owns,
and the saved/persisted shapes used by save and load.
"""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .tools import BlockTool


@dataclass
class Surface:
    """Rendered representation of one block.

    A surface is created by the owning tool when the block is constructed
    and released exactly once, when the block leaves the collection.
    """

    tool_name: str
    content: Any = None
    stretched: bool = False
    released: bool = False

    def release(self) -> None:
        """Drop the rendered content. Releasing twice is a no-op."""
        if self.released:
            return
        self.released = True
        self.content = None


@dataclass(frozen=True)
class BlockInfo:
    """Handle handed to external callers: the block key and its surface."""

    key: str
    surface: Surface


@dataclass
class SavedData:
    """Result of saving one block."""

    tool_name: str
    data: dict[str, Any]
    time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"tool_name": self.tool_name, "data": self.data}


class Block:
    """A content unit owned by a tool.

    Blocks are only built by the collection manager; the key is assigned
    once at construction and never changes.
    """

    def __init__(
        self,
        key: str,
        tool_name: str,
        data: dict[str, Any],
        tool: BlockTool,
    ) -> None:
        self._key = key
        self.tool_name = tool_name
        self.data = data
        self.tool = tool
        self.surface: Surface = tool.render_surface()
        self.surface.tool_name = tool_name
        self._stretched = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def stretched(self) -> bool:
        return self._stretched

    @stretched.setter
    def stretched(self, status: bool) -> None:
        self._stretched = bool(status)
        self.surface.stretched = self._stretched

    @property
    def released(self) -> bool:
        return self.surface.released

    @property
    def info(self) -> BlockInfo:
        return BlockInfo(key=self._key, surface=self.surface)

    async def save(self) -> SavedData:
        """Ask the tool for its current data.

        Tools may save synchronously or return an awaitable.
        """
        started = time.perf_counter()
        result = self.tool.save()
        if inspect.isawaitable(result):
            result = await result
        data = dict(result or {})
        self.data = data
        elapsed_ms = (time.perf_counter() - started) * 1000
        return SavedData(tool_name=self.tool_name, data=data, time=elapsed_ms)

    def release(self) -> None:
        """Let the tool clean up, then release the surface."""
        if self.surface.released:
            return
        destroy = getattr(self.tool, "destroy", None)
        try:
            if callable(destroy):
                destroy()
        finally:
            self.surface.release()

    def __repr__(self) -> str:
        return f"Block(key={self._key!r}, tool_name={self.tool_name!r})"


@dataclass
class OutputData:
    """Persisted document shape.

    Keys are not persisted; they are regenerated when the document loads.
    """

    blocks: list[dict[str, Any]] = field(default_factory=list)
    time: int = 0
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "blocks": [
                {"tool_name": b["tool_name"], "data": b.get("data", {})}
                for b in self.blocks
            ],
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OutputData:
        """Create from dictionary.

        Accepts "tool_name", "toolName" or "type" as the tool field.
        """
        blocks = []
        for entry in data.get("blocks", []):
            tool_name = entry.get("tool_name") or entry.get("toolName") or entry.get("type")
            if not tool_name:
                raise ValueError(f"Saved block has no tool name: {entry!r}")
            blocks.append({"tool_name": tool_name, "data": dict(entry.get("data") or {})})
        return cls(
            blocks=blocks,
            time=int(data.get("time", 0)),
            version=str(data.get("version", "")),
        )
