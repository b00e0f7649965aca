"""
Terminal lifecycle for the dashboard.

curses does the heavy lifting (raw input, alternate screen, drawing, polling).
The helpers here add a TERM preflight, termios save/restore and a forced
alternate-screen exit so the shell is usable again on every exit path.
"""

from __future__ import annotations

import curses
import logging
import os
import sys
from typing import Any, Callable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ncurses waits this long after ESC for the rest of a key sequence.
ESC_DELAY_MS = 25

_TERM_FALLBACKS = ["xterm-256color", "xterm", "screen-256color", "screen", "vt100", "linux"]


class TerminalIOError(Exception):
    """
    A terminal operation failed; fatal to the dashboard session.

    `operation` is "session" (starting or stopping curses), "draw" or "poll".
    """

    def __init__(self, message: str, *, operation: str) -> None:
        super().__init__(message)
        self.operation = operation

    def __str__(self) -> str:
        return f"{self.operation}: {self.args[0]}"


def _write_stdout_bytes(data: bytes) -> None:
    os.write(sys.stdout.fileno(), data)


def _is_xterm_like(term: str) -> bool:
    t = (term or "").lower()
    return any(t.startswith(p) for p in ("xterm", "screen", "tmux", "rxvt", "alacritty", "kitty", "wezterm", "foot"))


def _tigetstr(cap: str) -> Optional[bytes]:
    try:
        return curses.tigetstr(cap)
    except Exception:
        # tigetstr needs setupterm(); nothing to look up without it.
        return None


def force_exit_alternate_screen() -> None:
    """
    Best-effort: leave the alternate screen even if curses did not.

    Uses terminfo `rmcup` when available, and the xterm sequence for xterm-like
    terminals otherwise.
    """
    try:
        if not sys.stdout.isatty():
            return
    except Exception:
        return
    seq = _tigetstr("rmcup")
    if not seq and _is_xterm_like(os.environ.get("TERM", "")):
        seq = b"\x1b[?1049l"
    if not seq:
        return
    try:
        _write_stdout_bytes(seq)
    except Exception:
        return


def show_cursor() -> None:
    try:
        if not sys.stdout.isatty():
            return
    except Exception:
        return
    seq = _tigetstr("cnorm")
    if not seq and _is_xterm_like(os.environ.get("TERM", "")):
        seq = b"\x1b[?25h"
    if not seq:
        return
    try:
        _write_stdout_bytes(seq)
    except Exception:
        return


def save_termios() -> Optional[List[Any]]:
    """
    Snapshot the tty attributes of stdin, or None when there is no tty.
    """
    try:
        import termios  # POSIX

        if not sys.stdin.isatty():
            return None
        return termios.tcgetattr(sys.stdin.fileno())
    except Exception:
        return None


def restore_termios(saved: Optional[List[Any]]) -> None:
    if saved is None:
        return
    try:
        import termios  # POSIX

        termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, saved)
    except Exception:
        return


def prepare_term() -> None:
    """
    Best-effort terminal preflight before starting curses.

    Some hosts lack terminfo for newer $TERM values (e.g. "xterm-kitty"). Try
    the current $TERM first, then a few common fallbacks, and export the first
    one that loads. If all fail, curses.wrapper() reports the error.
    """
    try:
        current = (os.environ.get("TERM") or "").strip()
        candidates = ([current] if current else []) + _TERM_FALLBACKS
        seen = set()
        for t in candidates:
            if t in seen:
                continue
            seen.add(t)
            try:
                curses.setupterm(term=t, fd=sys.stdout.fileno())
            except Exception:
                continue
            if t != current:
                logger.warning("no terminfo for TERM=%r; using %r", current, t)
                os.environ["TERM"] = t
            return
    except Exception:
        return


def _session(stdscr: "curses.window", fn: Callable[["curses.window"], T], esc_delay_ms: int = ESC_DELAY_MS) -> T:
    # Raw mode: keys such as Ctrl+C and Ctrl+S arrive as plain input.
    curses.raw()
    stdscr.keypad(True)
    # The default delay is 1000 ms and getch() ignores stdscr.timeout() while
    # it runs.
    try:
        curses.set_escdelay(max(1, esc_delay_ms))
    except curses.error:
        pass
    try:
        curses.curs_set(0)
    except Exception:
        # Some terminals (or TERM/terminfo combinations) don't support this.
        pass
    try:
        curses.mousemask(curses.ALL_MOUSE_EVENTS)
    except Exception:
        pass
    try:
        return fn(stdscr)
    finally:
        try:
            curses.mousemask(0)
        except Exception:
            pass
        try:
            curses.curs_set(1)
        except Exception:
            pass


def run_in_terminal(fn: Callable[["curses.window"], T], *, esc_delay_ms: int = ESC_DELAY_MS) -> T:
    """
    Run `fn(stdscr)` inside a full-screen curses session.

    The terminal is restored on every exit path before this returns or raises.
    curses failures outside `fn` surface as TerminalIOError("session").
    `esc_delay_ms` bounds how long a bare ESC keeps getch() waiting.
    """
    prepare_term()
    saved = save_termios()
    try:
        return curses.wrapper(_session, fn, esc_delay_ms)
    except curses.error as e:
        raise TerminalIOError(str(e) or "curses error", operation="session") from e
    finally:
        restore_termios(saved)
        force_exit_alternate_screen()
        show_cursor()
