"""blockdoc Error Hierarchy.

Provides a structured error hierarchy for the block document model:
- BlockDocError: Base exception for all document errors
- UnknownToolError: Tool name not registered as a block tool
- IndexOutOfRangeError: Position outside the block sequence
- KeyNotFoundError: Block key not present in the collection
- ConversionUnsupportedError: Tools cannot take part in a conversion
- UnknownMethodError: Tool instance has no such callable method

Each error type includes:
- Descriptive message
- Optional context fields
- Recoverable flag for retry logic
- Structured representation for outer API layers

Usage:
    from blockdoc.errors import KeyNotFoundError

    if key not in self._key_index:
        raise KeyNotFoundError(f"Block not found: {key}", key=key)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Base Class
# =============================================================================


class BlockDocError(Exception):
    """Base exception for all blockdoc errors.

    Attributes:
        message: Human-readable error description
        recoverable: Whether the operation can be retried
        context: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        *,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured dictionary for API responses."""
        return {
            "type": _error_type_name(self),
            "message": self.message,
            "recoverable": self.recoverable,
            **{k: v for k, v in self.context.items() if v is not None},
        }


# =============================================================================
# Lookup Errors
# =============================================================================


class UnknownToolError(BlockDocError):
    """Tool name is not registered as a block-level tool."""

    def __init__(self, message: str, *, tool_name: str | None = None) -> None:
        super().__init__(message, context={"tool_name": tool_name})
        self.tool_name = tool_name


class IndexOutOfRangeError(BlockDocError):
    """Block index is outside the current sequence."""

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        length: int | None = None,
    ) -> None:
        super().__init__(message, context={"index": index, "length": length})
        self.index = index
        self.length = length


class KeyNotFoundError(BlockDocError):
    """Block key does not resolve to a block in the collection.

    Keys go stale when the block was removed or replaced, so callers
    holding on to a key across a suspension point must expect this.
    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        # Stale keys are recoverable: re-read the document and retry
        super().__init__(message, recoverable=True, context={"key": key})
        self.key = key


class UnknownMethodError(BlockDocError):
    """Tool instance has no public callable with the requested name."""

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        method: str | None = None,
    ) -> None:
        super().__init__(message, context={"key": key, "method": method})
        self.key = key
        self.method = method


# =============================================================================
# Conversion Errors
# =============================================================================


class ConversionUnsupportedError(BlockDocError):
    """Source or target tool does not declare both conversion directions."""

    def __init__(
        self,
        message: str,
        *,
        source_tool: str | None = None,
        target_tool: str | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            message,
            context={
                "source_tool": source_tool,
                "target_tool": target_tool,
                "reason": reason,
            },
        )
        self.source_tool = source_tool
        self.target_tool = target_tool
        self.reason = reason


# =============================================================================
# Key Generation Errors
# =============================================================================


class KeyGenerationError(BlockDocError):
    """Key factory kept producing keys that are already in use."""

    def __init__(self, message: str, *, attempts: int | None = None) -> None:
        super().__init__(message, context={"attempts": attempts})
        self.attempts = attempts


# =============================================================================
# Structured Responses
# =============================================================================


@dataclass
class ErrorResponse:
    """Structured error response for outer API layers."""

    error_type: str
    message: str
    recoverable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "error": {
                "type": self.error_type,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


def error_response(exc: Exception) -> ErrorResponse:
    """Convert an exception to a structured error response."""
    if isinstance(exc, BlockDocError):
        return ErrorResponse(
            error_type=_error_type_name(exc),
            message=exc.message,
            recoverable=exc.recoverable,
            details={k: v for k, v in exc.context.items() if v is not None},
        )

    return ErrorResponse(
        error_type="internal",
        message=str(exc) if str(exc) else "An unexpected error occurred",
        recoverable=False,
    )


def _error_type_name(exc: BlockDocError) -> str:
    """Short snake-ish type name: KeyNotFoundError -> keynotfound."""
    return type(exc).__name__.lower().replace("error", "")
