from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from blockdoc.settings import Settings, configure_logging


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("blockdoc")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestSettingsFromEnv:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "BLOCKDOC_DEFAULT_TOOL",
            "BLOCKDOC_KEY_PREFIX",
            "BLOCKDOC_KEY_ATTEMPTS",
            "BLOCKDOC_LOG_LEVEL",
            "BLOCKDOC_STOCK_TOOLS",
        ):
            monkeypatch.delenv(name, raising=False)

        s = Settings.from_env()

        assert s.default_tool == "paragraph"
        assert s.key_prefix == "block"
        assert s.key_attempts == 16
        assert s.log_level == "WARNING"
        assert s.include_stock_tools is True

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKDOC_DEFAULT_TOOL", "header")
        monkeypatch.setenv("BLOCKDOC_KEY_PREFIX", "b")
        monkeypatch.setenv("BLOCKDOC_KEY_ATTEMPTS", "4")
        monkeypatch.setenv("BLOCKDOC_STOCK_TOOLS", "off")

        s = Settings.from_env()

        assert s.default_tool == "header"
        assert s.key_prefix == "b"
        assert s.key_attempts == 4
        assert s.include_stock_tools is False

    def test_key_attempts_minimum(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKDOC_KEY_ATTEMPTS", "0")

        assert Settings.from_env().key_attempts == 1

    def test_unrecognized_bool_keeps_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKDOC_STOCK_TOOLS", "maybe")

        assert Settings.from_env().include_stock_tools is True

    def test_frozen(self) -> None:
        s = Settings()

        with pytest.raises(AttributeError):
            s.default_tool = "header"  # type: ignore[misc]


class TestConfigureLogging:
    def test_sets_level(self, package_logger: logging.Logger) -> None:
        logger = configure_logging("debug")

        assert logger is package_logger
        assert logger.level == logging.DEBUG

    def test_does_not_stack_handlers(self, package_logger: logging.Logger) -> None:
        configure_logging("info")
        configure_logging("info")

        marked = [h for h in package_logger.handlers if getattr(h, "_blockdoc_handler", False)]
        assert len(marked) == 1
