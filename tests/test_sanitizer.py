"""Tests for the HTML sanitizer."""

from __future__ import annotations

from blockdoc.blocks.sanitizer import HTMLSanitizer
from blockdoc.blocks.stock_tools import INLINE_FORMATTING


class TestHTMLSanitizer:
    """Test tag rules."""

    def setup_method(self) -> None:
        self.sanitizer = HTMLSanitizer()

    def test_empty_text(self) -> None:
        assert self.sanitizer.clean("", {"b": True}) == ""

    def test_allowed_tag_kept(self) -> None:
        assert self.sanitizer.clean("<b>x</b>", {"b": True}) == "<b>x</b>"

    def test_unknown_tag_unwrapped(self) -> None:
        """Tags without a rule lose their markup but keep their text."""
        assert self.sanitizer.clean("<i>x</i> y", {}) == "x y"

    def test_false_rule_unwraps(self) -> None:
        assert self.sanitizer.clean("<i>x</i>", {"i": False}) == "x"

    def test_attribute_whitelist(self) -> None:
        """A dict rule keeps only the whitelisted attributes."""
        cleaned = self.sanitizer.clean(
            '<a href="https://example.com" onclick="steal()">link</a>',
            INLINE_FORMATTING,
        )

        assert cleaned == '<a href="https://example.com">link</a>'

    def test_empty_attribute_rule_keeps_bare_tag(self) -> None:
        assert self.sanitizer.clean('<a href="u">x</a>', {"a": {}}) == "<a>x</a>"

    def test_true_rule_keeps_all_attributes(self) -> None:
        assert self.sanitizer.clean('<span class="c">x</span>', {"span": True}) == '<span class="c">x</span>'

    def test_script_content_dropped(self) -> None:
        """Script bodies are dropped even when the tag is allowed."""
        cleaned = self.sanitizer.clean("a<script>bad()</script>b", {"script": True})

        assert cleaned == "ab"

    def test_style_content_dropped(self) -> None:
        assert self.sanitizer.clean("<style>p {}</style>text", {}) == "text"

    def test_unclosed_tags_closed(self) -> None:
        assert self.sanitizer.clean("<b><i>open", {"b": True, "i": True}) == "<b><i>open</i></b>"

    def test_void_tags(self) -> None:
        """br is emitted without a closing tag in both spellings."""
        assert self.sanitizer.clean("x<br>y<br/>z", {"br": True}) == "x<br>y<br>z"

    def test_rule_names_case_insensitive(self) -> None:
        assert self.sanitizer.clean("<B>x</B>", {"B": True}) == "<b>x</b>"

    def test_text_reescaped(self) -> None:
        """Entities in text stay escaped."""
        assert self.sanitizer.clean("a &lt;b&gt;", {}) == "a &lt;b&gt;"

    def test_stray_end_tag_ignored(self) -> None:
        assert self.sanitizer.clean("x</b>", {"b": True}) == "x"
