"""
Unit tests for passphrase generation and clipboard operations.

This module tests:
- Length enforcement and character class requirements
- Look-alike manipulation of memorable text
- Clipboard copy through pyperclip
"""

import pyperclip
import pytest

from passenger import generator
from passenger.config import Config
from passenger.generator import (
    CHARSET,
    LOWERS,
    MIN_PER_SET,
    NUMBERS,
    SPECIALS,
    SUBSTITUTIONS,
    UPPERS,
    copy_to_clipboard,
    generate_passphrase,
    manipulate,
)


class TestGeneratePassphrase:
    """Test random passphrase generation."""

    def test_default_length(self):
        assert len(generate_passphrase()) == Config.DEFAULT_GENERATED_LENGTH

    @pytest.mark.parametrize("length", [8, 12, 50, 128])
    def test_requested_length(self, length):
        assert len(generate_passphrase(length)) == length

    @pytest.mark.parametrize("length", [-1, 0, 1, 7])
    def test_short_lengths_are_raised_to_minimum(self, length):
        assert len(generate_passphrase(length)) == Config.MIN_GENERATED_LENGTH

    def test_uses_only_charset(self):
        assert set(generate_passphrase(200)) <= set(CHARSET)

    @pytest.mark.parametrize("charset", [LOWERS, UPPERS, NUMBERS, SPECIALS])
    def test_every_set_is_represented(self, charset):
        """Even the shortest passphrase holds two characters of each set."""
        for _ in range(50):
            passphrase = generate_passphrase(Config.MIN_GENERATED_LENGTH)
            assert sum(c in charset for c in passphrase) >= MIN_PER_SET

    def test_passphrases_are_unique(self):
        passphrases = {generate_passphrase() for _ in range(100)}
        assert len(passphrases) == 100


class TestManipulate:
    def test_keeps_length(self):
        assert len(manipulate("correct horse battery")) == len("correct horse battery")

    def test_uses_known_substitutions(self):
        for source, result in zip("password", manipulate("password")):
            assert result in SUBSTITUTIONS[source]

    def test_unmapped_characters_are_lowercased(self):
        assert manipulate(" -ÄÖ") == " -äö"

    def test_uppercase_input_is_mapped_like_lowercase(self):
        assert manipulate("Q") in SUBSTITUTIONS["q"]

    def test_empty(self):
        assert manipulate("") == ""


class TestClipboard:
    """Test clipboard copy through pyperclip."""

    def test_copy_uses_pyperclip(self, monkeypatch):
        copied = []
        monkeypatch.setattr(generator.pyperclip, "copy", copied.append)

        assert copy_to_clipboard("test_text") is True
        assert copied == ["test_text"]

    def test_reports_unavailable_clipboard(self, monkeypatch):
        def fail(text):
            raise pyperclip.PyperclipException("no clipboard mechanism")

        monkeypatch.setattr(generator.pyperclip, "copy", fail)

        assert copy_to_clipboard("test") is False
