"""Tool registry for block content types.

A tool owns the meaning of a block's data. Tool classes declare their
conversion, sanitizing and toolbox settings as class attributes; the
registry normalizes those declarations into a ToolSpec so the rest of the
package never branches on how a tool chose to express them.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..errors import UnknownToolError
from .models import Surface

logger = logging.getLogger(__name__)

ExportFn = Callable[[dict[str, Any]], str]
ImportFn = Callable[[str], dict[str, Any]]


class BlockTool:
    """Base class for block tools.

    Subclasses override the class attributes they support and the
    ``render_surface`` / ``save`` pair.
    """

    # {"export": "field" | callable, "import": "field" | callable}
    conversion_config: ClassVar[dict[str, Any] | None] = None
    # Sanitizer rules applied to text imported into this tool
    sanitize: ClassVar[dict[str, Any]] = {}
    # {"title": ..., "icon": ...}; tools without an icon are not offered for conversion
    toolbox: ClassVar[dict[str, Any] | None] = None
    is_inline: ClassVar[bool] = False

    def __init__(self, data: dict[str, Any], config: dict[str, Any]) -> None:
        self.data = dict(data)
        self.config = dict(config)

    def render_surface(self) -> Surface:
        return Surface(tool_name=type(self).__name__, content=dict(self.data))

    def save(self) -> dict[str, Any] | Awaitable[dict[str, Any]]:
        return dict(self.data)


@dataclass(frozen=True)
class ConversionConfig:
    """Normalized conversion callables: export(data) -> str, import_(text) -> data."""

    export: ExportFn
    import_: ImportFn

    @classmethod
    def from_declaration(cls, declaration: dict[str, Any]) -> ConversionConfig | None:
        """Build from a tool's ``conversion_config``.

        Returns None unless both directions are declared.
        """
        export_decl = declaration.get("export")
        import_decl = declaration.get("import")
        if not export_decl or not import_decl:
            return None
        return cls(export=_normalize_export(export_decl), import_=_normalize_import(import_decl))


def _normalize_export(declaration: str | ExportFn) -> ExportFn:
    if callable(declaration):
        def _export(data: dict[str, Any]) -> str:
            result = declaration(data)
            return "" if result is None else str(result)

        return _export

    field_name = str(declaration)

    def _export_field(data: dict[str, Any]) -> str:
        value = data.get(field_name)
        return "" if value is None else str(value)

    return _export_field


def _normalize_import(declaration: str | ImportFn) -> ImportFn:
    if callable(declaration):
        def _import(text: str) -> dict[str, Any]:
            return dict(declaration(text) or {})

        return _import

    field_name = str(declaration)

    def _import_field(text: str) -> dict[str, Any]:
        return {field_name: text}

    return _import_field


@dataclass(frozen=True)
class ToolSpec:
    """Registry entry for one tool."""

    name: str
    tool_class: type[BlockTool]
    config: dict[str, Any] = field(default_factory=dict)
    conversion: ConversionConfig | None = None
    sanitize_rules: dict[str, Any] = field(default_factory=dict)
    toolbox: dict[str, Any] | None = None
    is_inline: bool = False

    @property
    def supports_conversion(self) -> bool:
        return self.conversion is not None

    @property
    def has_toolbox_icon(self) -> bool:
        return bool(self.toolbox and self.toolbox.get("icon"))


class ToolRegistry:
    """Name -> tool lookup used to construct blocks."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        tool_class: type[BlockTool],
        config: dict[str, Any] | None = None,
    ) -> ToolSpec:
        """Register (or re-register) a tool under ``name``."""
        declaration = getattr(tool_class, "conversion_config", None)
        conversion = ConversionConfig.from_declaration(declaration) if declaration else None
        spec = ToolSpec(
            name=name,
            tool_class=tool_class,
            config=dict(config or {}),
            conversion=conversion,
            sanitize_rules=dict(getattr(tool_class, "sanitize", {}) or {}),
            toolbox=getattr(tool_class, "toolbox", None),
            is_inline=bool(getattr(tool_class, "is_inline", False)),
        )
        if name in self._tools:
            logger.debug("Re-registering tool %s", name)
        self._tools[name] = spec
        return spec

    def is_block_tool(self, name: str) -> bool:
        spec = self._tools.get(name)
        return spec is not None and not spec.is_inline

    def get_tool_class(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(f"Tool is not registered: {name}", tool_name=name)
        return spec

    def create_tool_instance(
        self,
        name: str,
        data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
    ) -> BlockTool:
        """Instantiate a block tool.

        Raises:
            UnknownToolError: If ``name`` is not a registered block-level tool.
        """
        if not self.is_block_tool(name):
            raise UnknownToolError(f"Not a block tool: {name}", tool_name=name)
        spec = self._tools[name]
        merged = {**spec.config, **(config or {})}
        return spec.tool_class(dict(data or {}), merged)

    @property
    def available(self) -> dict[str, ToolSpec]:
        return dict(self._tools)

    def conversion_targets(self) -> list[str]:
        """Block tools that can be offered as conversion targets.

        Inline tools, tools without a toolbox icon and tools missing
        either conversion direction are left out.
        """
        return [
            name
            for name, spec in self._tools.items()
            if not spec.is_inline and spec.has_toolbox_icon and spec.supports_conversion
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)
