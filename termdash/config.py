from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Entry = Tuple[str, int]


@dataclass(frozen=True)
class DashboardConfig:
    # Seconds between on_tick() calls; also the longest the loop waits for input.
    tick_rate_s: float = 0.25
    # How long to wait for the rest of a raw escape sequence after ESC.
    esc_timeout_ms: int = 25

    tabs_title: str = "Tabs"
    list_title: str = "List"
    panel_title: str = "Block 2"
    highlight_symbol: str = ">> "
    tab_divider: str = "•"

    seed_items: Tuple[Entry, ...] = (
        ("Item0", 1),
        ("Item1", 2),
        ("Item2", 3),
    )
    seed_tabs: Tuple[Entry, ...] = (
        ("Test0", 1),
        ("Test1", 2),
        ("Test2", 3),
        ("Test3", 4),
    )
    # Content swapped into the list by the `m` key.
    alternate_items: Tuple[Entry, ...] = (
        ("test", 1),
        ("Testing", 2),
    )


DEFAULT_CONFIG = DashboardConfig()
