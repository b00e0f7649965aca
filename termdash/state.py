from __future__ import annotations

from typing import Optional

from termdash.config import DEFAULT_CONFIG, DashboardConfig, Entry
from termdash.selection import SelectionList


class AppState:
    """
    All UI state for one dashboard session.

    `items` backs the list pane and `tabs` the tab strip; their cursors are
    independent of each other. One instance is created per run_app() call and
    handed to the key dispatcher (mutable) and the renderer (read-only).
    """

    def __init__(self, config: Optional[DashboardConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.items: SelectionList[Entry] = SelectionList.with_items(self.config.seed_items)
        self.tabs: SelectionList[Entry] = SelectionList.with_items(self.config.seed_tabs)

    @classmethod
    def new(cls, config: Optional[DashboardConfig] = None) -> "AppState":
        return cls(config)

    def on_tick(self) -> None:
        # Hook for time-driven updates; must stay non-blocking.
        return
