from __future__ import annotations

import curses
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from termdash.config import DEFAULT_CONFIG, DashboardConfig, Entry
from termdash.formatting import display_width, pad_to_width, truncate_to_width
from termdash.keys import KEY_ESC, _decode_esc_sequence, dispatch_key
from termdash.layout import Layout, Rect, compute_layout
from termdash.state import AppState
from termdash.terminal import TerminalIOError

logger = logging.getLogger(__name__)

Span = Tuple[str, int]
Row = Tuple[Span, ...]


@dataclass(frozen=True)
class Theme:
    tab_attr: int
    tab_selected_attr: int
    list_selected_attr: int

    @classmethod
    def monochrome(cls) -> "Theme":
        return cls(
            tab_attr=0,
            tab_selected_attr=curses.A_BOLD | curses.A_UNDERLINE,
            list_selected_attr=curses.A_REVERSE | curses.A_BOLD,
        )


def _init_theme() -> Theme:
    # Fallback theme (no color support).
    fallback = Theme.monochrome()
    if not curses.has_colors():
        return fallback

    try:
        curses.start_color()
    except Exception:
        return fallback

    bg = curses.COLOR_BLACK
    try:
        curses.use_default_colors()
        bg = -1
    except Exception:
        pass

    try:
        pair_tab = 1
        pair_tab_selected = 2
        pair_list_selected = 3
        curses.init_pair(pair_tab, curses.COLOR_WHITE, bg)
        curses.init_pair(pair_tab_selected, curses.COLOR_CYAN, bg)
        curses.init_pair(pair_list_selected, curses.COLOR_BLACK, curses.COLOR_CYAN)
        return Theme(
            tab_attr=curses.color_pair(pair_tab),
            tab_selected_attr=curses.color_pair(pair_tab_selected),
            list_selected_attr=curses.color_pair(pair_list_selected) | curses.A_BOLD,
        )
    except Exception:
        return fallback


def _safe_addstr(win: "curses.window", y: int, x: int, s: str, attr: int = 0) -> None:
    try:
        win.addstr(y, x, s, attr)
    except curses.error:
        # Writing the bottom-right cell of a window always "fails"; ignore it.
        return


def _tab_spans(
    rect: Rect,
    tabs: Sequence[Entry],
    selected: Optional[int],
    *,
    theme: Theme,
    divider: str,
) -> List[Row]:
    """
    Build the single tab-strip row as styled spans.

    With no cursor the first tab is shown as active.
    """
    if rect.h < 3 or rect.w < 4:
        return []
    inner_w = rect.w - 2
    active = 0 if selected is None else selected

    spans: List[Span] = []
    for i, (label, _tag) in enumerate(tabs):
        if i:
            spans.append((" " + divider, theme.tab_attr))
        spans.append((" ", theme.tab_attr))
        spans.append((label, theme.tab_selected_attr if i == active else theme.tab_attr))

    # Clip to the inner width and pad the tail with the base style.
    out: List[Span] = []
    used = 0
    for text, attr in spans:
        room = inner_w - used
        if room <= 0:
            break
        text = truncate_to_width(text, room)
        if text:
            out.append((text, attr))
            used += display_width(text)
    if used < inner_w:
        out.append((" " * (inner_w - used), theme.tab_attr))
    return [tuple(out)]


def _list_offset(selected: Optional[int], view_h: int) -> int:
    # Scroll just far enough that the cursor row is on screen.
    if selected is None or view_h <= 0 or selected < view_h:
        return 0
    return selected - view_h + 1


def _list_rows(
    rect: Rect,
    items: Sequence[Entry],
    selected: Optional[int],
    *,
    theme: Theme,
    highlight_symbol: str,
) -> List[Row]:
    """
    Build the visible rows of the list pane, one span per row.

    The cursor row gets the highlight symbol and style; when a cursor exists the
    other rows are indented by the symbol width so labels stay aligned.
    """
    if rect.h < 3 or rect.w < 4:
        return []
    inner_h = rect.h - 2
    inner_w = rect.w - 2
    blank_symbol = " " * display_width(highlight_symbol)

    start = _list_offset(selected, inner_h)
    out: List[Row] = []
    for row in range(inner_h):
        idx = start + row
        if idx >= len(items):
            out.append(((pad_to_width("", inner_w), 0),))
            continue
        label, _tag = items[idx]
        if selected is None:
            out.append(((pad_to_width(label, inner_w), 0),))
        elif idx == selected:
            out.append(((pad_to_width(highlight_symbol + label, inner_w), theme.list_selected_attr),))
        else:
            out.append(((pad_to_width(blank_symbol + label, inner_w), 0),))
    return out


class _Pane:
    """
    A bordered pane: an outer window for the box and title plus an inner
    content window. Rows already on screen are not rewritten.
    """

    def __init__(self, stdscr: "curses.window", rect: Rect) -> None:
        self.rect = rect
        self.outer: "curses.window" = stdscr.derwin(rect.h, rect.w, rect.y, rect.x)
        self.outer.leaveok(True)

        self.inner: Optional["curses.window"] = None
        if rect.h >= 3 and rect.w >= 4:
            self.inner = self.outer.derwin(rect.h - 2, rect.w - 2, 1, 1)
            self.inner.leaveok(True)

        self._title: Optional[str] = None
        self._inner_cache: List[Optional[Row]] = []

    def draw_frame(self, title: str, *, force: bool = False) -> None:
        if not force and self._title == title:
            return
        self._title = title
        self.outer.box()
        if self.rect.w >= 3:
            _safe_addstr(self.outer, 0, 1, truncate_to_width(title, self.rect.w - 2))
        self.outer.noutrefresh()

    def draw_inner_rows(self, rows: List[Row], *, force: bool = False) -> None:
        if not self.inner:
            return
        inner_h, inner_w = self.inner.getmaxyx()
        if inner_h <= 0 or inner_w <= 0:
            return

        if len(self._inner_cache) != inner_h:
            self._inner_cache = [None] * inner_h
            force = True
        changed = False

        blank: Row = ((" " * inner_w, 0),)
        for i in range(inner_h):
            row = rows[i] if i < len(rows) else blank
            if not force and self._inner_cache[i] == row:
                continue
            x = 0
            for text, attr in row:
                _safe_addstr(self.inner, i, x, text, attr)
                x += display_width(text)
            self._inner_cache[i] = row
            changed = True

        if changed:
            self.inner.noutrefresh()


class _Renderer:
    """
    Draws AppState into the terminal. Never mutates the state.

    Pane windows are kept across frames and rebuilt only when the terminal
    size (and so the layout) changes.
    """

    def __init__(self, stdscr: "curses.window", *, config: DashboardConfig, theme: Theme) -> None:
        self.stdscr = stdscr
        self.config = config
        self.theme = theme
        self._layout: Optional[Layout] = None
        self._max_yx: Optional[Tuple[int, int]] = None

        self.tabs_pane: Optional[_Pane] = None
        self.list_pane: Optional[_Pane] = None
        self.panel_pane: Optional[_Pane] = None

    def ensure(self, layout: Layout, max_y: int, max_x: int) -> bool:
        """
        Ensure windows exist for the given layout. Returns True if rebuilt.
        """
        if self._layout == layout and self._max_yx == (max_y, max_x):
            return False

        self.stdscr.erase()
        self.stdscr.noutrefresh()

        self._layout = layout
        self._max_yx = (max_y, max_x)
        self.tabs_pane = None if layout.tabs.empty else _Pane(self.stdscr, layout.tabs)
        self.list_pane = None if layout.items.empty else _Pane(self.stdscr, layout.items)
        self.panel_pane = None if layout.panel.empty else _Pane(self.stdscr, layout.panel)
        return True

    def draw(self, app: AppState) -> None:
        try:
            max_y, max_x = self.stdscr.getmaxyx()
            layout = compute_layout(max_y, max_x)
            force = self.ensure(layout, max_y, max_x)
            cfg = self.config

            if self.tabs_pane:
                self.tabs_pane.draw_frame(cfg.tabs_title, force=force)
                self.tabs_pane.draw_inner_rows(
                    _tab_spans(
                        layout.tabs,
                        app.tabs.items,
                        app.tabs.selected,
                        theme=self.theme,
                        divider=cfg.tab_divider,
                    ),
                    force=force,
                )
            if self.list_pane:
                self.list_pane.draw_frame(cfg.list_title, force=force)
                self.list_pane.draw_inner_rows(
                    _list_rows(
                        layout.items,
                        app.items.items,
                        app.items.selected,
                        theme=self.theme,
                        highlight_symbol=cfg.highlight_symbol,
                    ),
                    force=force,
                )
            if self.panel_pane:
                self.panel_pane.draw_frame(cfg.panel_title, force=force)

            curses.doupdate()
        except curses.error as e:
            raise TerminalIOError(str(e) or "curses error", operation="draw") from e


def _poll_timeout_ms(tick_rate_s: float, last_tick: float, now: float) -> int:
    """
    Milliseconds left until the next tick, rounded down, never negative.
    """
    remaining = tick_rate_s - (now - last_tick)
    if remaining <= 0:
        return 0
    return int(remaining * 1000)


def _read_key(stdscr: "curses.window", timeout_ms: int, *, esc_timeout_ms: int) -> int:
    """
    Wait at most `timeout_ms` for one input event. Returns -1 on timeout.
    """
    try:
        stdscr.timeout(timeout_ms)
        ch = stdscr.getch()
        if ch == KEY_ESC:
            ch = _decode_esc_sequence(stdscr, timeout_ms=esc_timeout_ms, restore_timeout_ms=timeout_ms)
        return ch
    except curses.error as e:
        raise TerminalIOError(str(e) or "curses error", operation="poll") from e


def run_app(
    stdscr: "curses.window",
    app: AppState,
    *,
    theme: Optional[Theme] = None,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Draw / wait / dispatch until the quit key is pressed.

    The only blocking call is the input wait, bounded by the time left until
    the next tick, so on_tick() runs on schedule with no input at all.
    Terminal failures raise TerminalIOError and end the loop.
    """
    cfg = app.config
    renderer = _Renderer(stdscr, config=cfg, theme=theme or Theme.monochrome())

    last_tick = clock()
    # Open with the first entry highlighted.
    app.items.next()
    logger.info("dashboard loop started (tick %.3fs)", cfg.tick_rate_s)

    while True:
        renderer.draw(app)

        timeout_ms = _poll_timeout_ms(cfg.tick_rate_s, last_tick, clock())
        ch = _read_key(stdscr, timeout_ms, esc_timeout_ms=cfg.esc_timeout_ms)
        if ch != -1 and dispatch_key(app, ch):
            logger.info("quit requested")
            return

        now = clock()
        if now - last_tick >= cfg.tick_rate_s:
            app.on_tick()
            last_tick = now


def run_dashboard(stdscr: "curses.window", config: DashboardConfig = DEFAULT_CONFIG) -> None:
    run_app(stdscr, AppState.new(config), theme=_init_theme())
