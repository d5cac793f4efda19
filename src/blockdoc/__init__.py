"""blockdoc - document model of a block-based rich content editor."""

import logging

from ._version import __version__
from .api import BlocksAPI
from .blocks import (
    Block,
    BlockCollection,
    BlockTool,
    ConversionCoordinator,
    HTMLSanitizer,
    OutputData,
    Surface,
    ToolRegistry,
)
from .editor import BlockEditor
from .errors import (
    BlockDocError,
    ConversionUnsupportedError,
    IndexOutOfRangeError,
    KeyNotFoundError,
    UnknownMethodError,
    UnknownToolError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "Block",
    "BlockCollection",
    "BlockDocError",
    "BlockEditor",
    "BlockTool",
    "BlocksAPI",
    "ConversionCoordinator",
    "ConversionUnsupportedError",
    "HTMLSanitizer",
    "IndexOutOfRangeError",
    "KeyNotFoundError",
    "OutputData",
    "Surface",
    "ToolRegistry",
    "UnknownMethodError",
    "UnknownToolError",
]
