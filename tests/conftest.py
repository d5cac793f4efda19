from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

import pytest

from blockdoc.blocks.collection import BlockCollection
from blockdoc.blocks.models import Surface
from blockdoc.blocks.stock_tools import register_stock_tools
from blockdoc.blocks.tools import BlockTool, ToolRegistry
from blockdoc.settings import Settings


class AsyncSaveTool(BlockTool):
    """Tool whose save() is a coroutine, with a field-name conversion."""

    conversion_config = {"export": "body", "import": "body"}
    toolbox = {"title": "Async", "icon": "A"}

    async def save(self) -> dict[str, Any]:
        return dict(self.data)


class InlineBoldTool(BlockTool):
    """Inline tool: registered, but never a block tool."""

    is_inline = True


class DestroyTrackingTool(BlockTool):
    """Counts destroy() calls."""

    def __init__(self, data: dict[str, Any], config: dict[str, Any]) -> None:
        super().__init__(data, config)
        self.destroyed = 0

    def render_surface(self) -> Surface:
        return Surface(tool_name="tracking", content="<div></div>")

    def destroy(self) -> None:
        self.destroyed += 1


class FailingDestroyTool(BlockTool):
    """destroy() always raises."""

    def destroy(self) -> None:
        raise RuntimeError("destroy failed")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        default_tool="paragraph",
        key_prefix="block",
        key_attempts=16,
        log_level="WARNING",
        include_stock_tools=True,
    )


@pytest.fixture
def registry() -> ToolRegistry:
    """Stock tools plus a few test tools."""
    reg = register_stock_tools(ToolRegistry())
    reg.register("async", AsyncSaveTool)
    reg.register("bold", InlineBoldTool)
    reg.register("tracking", DestroyTrackingTool)
    reg.register("boom", FailingDestroyTool)
    return reg


@pytest.fixture
def key_factory() -> Callable[[], str]:
    """Deterministic keys: k1, k2, k3, ..."""
    counter = itertools.count(1)
    return lambda: f"k{next(counter)}"


@pytest.fixture
def collection(registry: ToolRegistry, test_settings: Settings, key_factory) -> BlockCollection:
    return BlockCollection(registry, settings=test_settings, key_factory=key_factory)


@pytest.fixture
def filled(collection: BlockCollection) -> BlockCollection:
    """Collection with three paragraphs: k1 'a', k2 'b', k3 'c'; current is 0."""
    for text in ("a", "b", "c"):
        collection.insert("paragraph", {"text": text}, {}, index=len(collection))
    collection.current_index = 0
    return collection


def _assert_consistent(collection: BlockCollection) -> None:
    """Key index matches the sequence exactly and the current index is valid."""
    keys = collection.keys()
    assert len(set(keys)) == len(keys)
    assert collection.key_index() == {key: i for i, key in enumerate(keys)}
    for i, key in enumerate(keys):
        assert collection.get_block_by_key(key) is collection.get_block_by_index(i)
    if len(collection):
        assert collection.current_index is not None
        assert 0 <= collection.current_index < len(collection)
    else:
        assert collection.current_index is None


@pytest.fixture
def assert_consistent() -> Callable[[BlockCollection], None]:
    return _assert_consistent
