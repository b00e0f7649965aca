from __future__ import annotations

import curses
import logging
from enum import Enum
from typing import Dict, List, Optional

from termdash.state import AppState

logger = logging.getLogger(__name__)

KEY_ESC = 27
KEY_TAB = 9


class KeyAction(Enum):
    QUIT = "quit"
    LIST_NEXT = "list_next"
    LIST_PREVIOUS = "list_previous"
    LIST_UNSELECT = "list_unselect"
    LIST_REPLACE = "list_replace"
    TAB_PREVIOUS = "tab_previous"
    TAB_NEXT = "tab_next"


KEYMAP: Dict[int, KeyAction] = {
    ord("q"): KeyAction.QUIT,
    curses.KEY_DOWN: KeyAction.LIST_NEXT,
    ord("j"): KeyAction.LIST_NEXT,
    KEY_TAB: KeyAction.LIST_NEXT,
    curses.KEY_UP: KeyAction.LIST_PREVIOUS,
    ord("k"): KeyAction.LIST_PREVIOUS,
    ord("u"): KeyAction.LIST_UNSELECT,
    ord("m"): KeyAction.LIST_REPLACE,
    curses.KEY_LEFT: KeyAction.TAB_PREVIOUS,
    curses.KEY_RIGHT: KeyAction.TAB_NEXT,
}


def action_for_key(ch: int) -> Optional[KeyAction]:
    return KEYMAP.get(ch)


def dispatch_key(app: AppState, ch: int) -> bool:
    """
    Apply the action bound to `ch` to `app`.

    Returns True when the key asks the loop to stop. Unbound keys (including
    resize and mouse events) leave the state untouched.
    """
    action = action_for_key(ch)
    if action is None:
        return False
    logger.debug("key %r -> %s", ch, action.value)

    if action is KeyAction.QUIT:
        return True
    if action is KeyAction.LIST_NEXT:
        app.items.next()
    elif action is KeyAction.LIST_PREVIOUS:
        app.items.previous()
    elif action is KeyAction.LIST_UNSELECT:
        app.items.unselect()
    elif action is KeyAction.LIST_REPLACE:
        # No automatic re-select here, unlike startup.
        app.items.replace_items(app.config.alternate_items)
    elif action is KeyAction.TAB_PREVIOUS:
        app.tabs.previous()
    elif action is KeyAction.TAB_NEXT:
        app.tabs.next()
    return False


# Raw escape sequences, for terminals where keypad() does not translate arrows.

_ARROW_FINALS = {
    "A": curses.KEY_UP,
    "B": curses.KEY_DOWN,
    "C": curses.KEY_RIGHT,
    "D": curses.KEY_LEFT,
}

# Single-character SS3 finals: arrows and F1-F4.
_SS3_FINALS = "ABCDPQRS"

_MAX_ESC_LEN = 8


def _esc_sequence_prefix_ok(seq: str) -> bool:
    if not seq:
        return False
    if seq[0] == "O":
        return len(seq) == 1 or (len(seq) == 2 and seq[1] in _SS3_FINALS)
    return seq[0] == "["


def _esc_sequence_complete(seq: str) -> bool:
    """
    True when `seq` (the bytes after ESC) forms a whole CSI or SS3 sequence.
    """
    if len(seq) < 2:
        return False
    if seq[0] == "O":
        return len(seq) == 2 and seq[1] in _SS3_FINALS
    if seq[0] == "[":
        return "@" <= seq[-1] <= "~"
    return False


def _map_esc_sequence(seq: str) -> Optional[int]:
    if len(seq) < 2 or seq[0] not in ("[", "O"):
        return None
    final = seq[-1]
    params = seq[1:-1]
    if final not in _ARROW_FINALS:
        return None
    if seq[0] == "O":
        return _ARROW_FINALS[final] if not params else None
    # CSI arrows may carry a modifier, e.g. "[1;5A".
    if params and not all(c.isdigit() or c == ";" for c in params):
        return None
    return _ARROW_FINALS[final]


def _decode_esc_sequence(
    win: "curses.window",
    *,
    timeout_ms: int,
    restore_timeout_ms: int,
) -> int:
    """
    Read the rest of an escape sequence after ESC and map it to a curses key.

    Input that is not an escape sequence, or is cut short, is pushed back with
    curses.ungetch() (in reverse, so it is read again in arrival order)
    and a bare ESC is returned.
    """
    buf: List[int] = []
    win.timeout(timeout_ms)
    try:
        while len(buf) < _MAX_ESC_LEN:
            ch = win.getch()
            if ch == -1:
                break
            buf.append(ch)
            if not (0 <= ch < 256):
                break
            seq = "".join(chr(c) for c in buf)
            if _esc_sequence_complete(seq) or not _esc_sequence_prefix_ok(seq):
                break
    finally:
        win.timeout(restore_timeout_ms)

    if buf and all(0 <= c < 256 for c in buf):
        seq = "".join(chr(c) for c in buf)
        if _esc_sequence_complete(seq):
            # Whole but unbound sequences (F-keys, PgUp, ...) are dropped so
            # their bytes never reach the key map.
            key = _map_esc_sequence(seq)
            return KEY_ESC if key is None else key
    for c in reversed(buf):
        curses.ungetch(c)
    return KEY_ESC
