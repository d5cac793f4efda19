"""Block document model.

Key components:
- models: Block, Surface, SavedData, OutputData
- tools: BlockTool base class and the ToolRegistry
- stock_tools: paragraph, header, list, code and delimiter tools
- sanitizer: HTMLSanitizer for text crossing tool boundaries
- collection: BlockCollection, the ordered key-addressable block store
- conversion: ConversionCoordinator (export -> sanitize -> import -> replace)
- renderer: bulk Renderer and Saver
- paste: MarkdownPasteProcessor
"""

from .collection import BlockCollection
from .conversion import ConversionCoordinator
from .models import Block, BlockInfo, OutputData, SavedData, Surface
from .paste import MarkdownPasteProcessor
from .renderer import Renderer, Saver
from .sanitizer import HTMLSanitizer, Sanitizer
from .stock_tools import STOCK_TOOLS, register_stock_tools
from .tools import BlockTool, ConversionConfig, ToolRegistry, ToolSpec

__all__ = [
    "Block",
    "BlockInfo",
    "BlockCollection",
    "BlockTool",
    "ConversionConfig",
    "ConversionCoordinator",
    "HTMLSanitizer",
    "MarkdownPasteProcessor",
    "OutputData",
    "Renderer",
    "STOCK_TOOLS",
    "SavedData",
    "Sanitizer",
    "Saver",
    "Surface",
    "ToolRegistry",
    "ToolSpec",
    "register_stock_tools",
]
