from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, default: int, min_val: int | None = None) -> int:
    """Get integer from environment with optional minimum enforcement."""
    val = int(os.environ.get(name, str(default)))
    if min_val is not None and val < min_val:
        return min_val
    return val


@dataclass(frozen=True)
class Settings:
    """Static settings for the block document model.

    Field defaults are read from the environment at import time; use
    from_env() to pick up variables set later.
    """

    # Tool used to re-seed an emptied document and for insert() without a tool
    default_tool: str = os.environ.get("BLOCKDOC_DEFAULT_TOOL", "paragraph")

    # Generated keys look like "<prefix>-<12 hex chars>"
    key_prefix: str = os.environ.get("BLOCKDOC_KEY_PREFIX", "block")
    key_attempts: int = _env_int("BLOCKDOC_KEY_ATTEMPTS", 16, min_val=1)

    log_level: str = os.environ.get("BLOCKDOC_LOG_LEVEL", "WARNING")

    # Register paragraph/header/list/code/delimiter when no registry is given
    include_stock_tools: bool = _env_bool("BLOCKDOC_STOCK_TOOLS", True)

    @classmethod
    def from_env(cls) -> Settings:
        """Re-read every field from the current environment."""
        return cls(
            default_tool=os.environ.get("BLOCKDOC_DEFAULT_TOOL", "paragraph"),
            key_prefix=os.environ.get("BLOCKDOC_KEY_PREFIX", "block"),
            key_attempts=_env_int("BLOCKDOC_KEY_ATTEMPTS", 16, min_val=1),
            log_level=os.environ.get("BLOCKDOC_LOG_LEVEL", "WARNING"),
            include_stock_tools=_env_bool("BLOCKDOC_STOCK_TOOLS", True),
        )


settings = Settings()


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Library code only logs; applications opt in to output by calling this.
    Calling it twice does not stack handlers.
    """
    package_logger = logging.getLogger("blockdoc")
    package_logger.setLevel((level or settings.log_level).upper())
    if not any(getattr(h, "_blockdoc_handler", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handler._blockdoc_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)
    return package_logger
