"""Key events understood by the interactive session.

Raw input (single characters or terminal escape sequences, as returned
by ``click.getchar``) is decoded into Key values so that the state
machine never deals with terminal specifics.
"""

from enum import Enum


class Key(str, Enum):
    """Discrete input events."""

    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    TOGGLE = "toggle"
    SELECT_ALL = "select_all"
    SELECT_NONE = "select_none"
    DELETE = "delete"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    QUIT = "quit"
    SORT = "sort"
    DETAILS = "details"
    UNKNOWN = "unknown"


# Escape sequences emitted by common terminals (xterm, vt100, Windows console)
_SEQUENCES: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1bOA": Key.UP,
    "\xe0H": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1bOB": Key.DOWN,
    "\xe0P": Key.DOWN,
    "\x1b[5~": Key.PAGE_UP,
    "\xe0I": Key.PAGE_UP,
    "\x1b[6~": Key.PAGE_DOWN,
    "\xe0Q": Key.PAGE_DOWN,
    "\x1b[H": Key.HOME,
    "\x1bOH": Key.HOME,
    "\x1b[1~": Key.HOME,
    "\xe0G": Key.HOME,
    "\x1b[F": Key.END,
    "\x1bOF": Key.END,
    "\x1b[4~": Key.END,
    "\xe0O": Key.END,
    "\x1b[3~": Key.DELETE,
    "\xe0S": Key.DELETE,
    "\x1b": Key.CANCEL,
    "\r": Key.CONFIRM,
    "\n": Key.CONFIRM,
    " ": Key.TOGGLE,
}

_CHARACTERS: dict[str, Key] = {
    "k": Key.UP,
    "j": Key.DOWN,
    "g": Key.HOME,
    "G": Key.END,
    "a": Key.SELECT_ALL,
    "u": Key.SELECT_NONE,
    "d": Key.DELETE,
    "y": Key.CONFIRM,
    "n": Key.CANCEL,
    "q": Key.QUIT,
    "s": Key.SORT,
    "e": Key.DETAILS,
}

HELP_TEXT = (
    "↑/↓: Navigate | Space: Toggle | A: Select All | U: Deselect All | "
    "D: Delete Selected | S: Sort | E: Errors | Q: Quit"
)


def decode_key(raw: str) -> Key:
    """Translate raw terminal input into a Key.

    Letter bindings are case-insensitive except for ``G`` (jump to end).

    Args:
        raw: Characters read from the terminal for one key press.

    Returns:
        The decoded Key, or Key.UNKNOWN.
    """
    if raw in _SEQUENCES:
        return _SEQUENCES[raw]
    if raw in _CHARACTERS:
        return _CHARACTERS[raw]
    lowered = raw.lower()
    if len(raw) == 1 and lowered in _CHARACTERS:
        return _CHARACTERS[lowered]
    return Key.UNKNOWN
