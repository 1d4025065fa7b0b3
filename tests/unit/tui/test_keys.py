"""Unit tests for raw key decoding."""

import pytest
from ggufclean.tui.keys import HELP_TEXT, Key, decode_key


class TestDecodeKey:
    """Tests for decode_key."""

    @pytest.mark.parametrize(
        ("raw", "key"),
        [
            ("\x1b[A", Key.UP),
            ("\x1b[B", Key.DOWN),
            ("\x1bOA", Key.UP),
            ("\x1b[5~", Key.PAGE_UP),
            ("\x1b[6~", Key.PAGE_DOWN),
            ("\x1b[H", Key.HOME),
            ("\x1b[F", Key.END),
            ("\xe0H", Key.UP),
        ],
    )
    def test_escape_sequences(self, raw: str, key: Key) -> None:
        """Arrow and paging keys from common terminals are recognised."""
        assert decode_key(raw) == key

    @pytest.mark.parametrize(
        ("raw", "key"),
        [
            (" ", Key.TOGGLE),
            ("a", Key.SELECT_ALL),
            ("u", Key.SELECT_NONE),
            ("d", Key.DELETE),
            ("q", Key.QUIT),
            ("s", Key.SORT),
            ("e", Key.DETAILS),
            ("k", Key.UP),
            ("j", Key.DOWN),
        ],
    )
    def test_letter_bindings(self, raw: str, key: Key) -> None:
        """Single-letter bindings map to their actions."""
        assert decode_key(raw) == key

    def test_letters_case_insensitive(self) -> None:
        """Upper-case letters behave like lower-case ones."""
        assert decode_key("A") == Key.SELECT_ALL
        assert decode_key("Q") == Key.QUIT
        assert decode_key("D") == Key.DELETE

    def test_capital_g_jumps_to_end(self) -> None:
        """G is the one case-sensitive binding."""
        assert decode_key("g") == Key.HOME
        assert decode_key("G") == Key.END

    def test_confirmation_keys(self) -> None:
        """y and Enter confirm; n and Esc cancel."""
        assert decode_key("y") == Key.CONFIRM
        assert decode_key("\r") == Key.CONFIRM
        assert decode_key("\n") == Key.CONFIRM
        assert decode_key("n") == Key.CANCEL
        assert decode_key("\x1b") == Key.CANCEL

    def test_unknown(self) -> None:
        """Unbound input decodes to UNKNOWN."""
        assert decode_key("z") == Key.UNKNOWN
        assert decode_key("\x1b[99~") == Key.UNKNOWN
        assert decode_key("") == Key.UNKNOWN

    def test_help_text_mentions_bindings(self) -> None:
        """The help line lists the main actions."""
        for label in ("Space", "Delete", "Quit", "Sort"):
            assert label in HELP_TEXT
