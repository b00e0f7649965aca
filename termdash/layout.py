from __future__ import annotations

from dataclasses import dataclass
from typing import List

from termdash.formatting import clamp

MARGIN = 1
LEFT_PERCENT = 50
TABS_PERCENT = 10
# A bordered tab strip needs three rows to show its labels.
MIN_TABS_H = 3


@dataclass(frozen=True)
class Rect:
    y: int
    x: int
    h: int
    w: int

    @property
    def empty(self) -> bool:
        return self.h <= 0 or self.w <= 0

    def inset(self, margin: int) -> "Rect":
        h = max(0, self.h - 2 * margin)
        w = max(0, self.w - 2 * margin)
        return Rect(self.y + margin, self.x + margin, h, w)


@dataclass(frozen=True)
class Layout:
    tabs: Rect
    items: Rect
    panel: Rect


def split_percent(total: int, percents: List[int]) -> List[int]:
    """
    Split `total` cells by percentage; the last part takes the remainder.
    """
    sizes = [max(0, total * p // 100) for p in percents[:-1]]
    sizes.append(max(0, total - sum(sizes)))
    return sizes


def compute_layout(max_y: int, max_x: int) -> Layout:
    area = Rect(0, 0, max(0, max_y), max(0, max_x)).inset(MARGIN)

    left_w, right_w = split_percent(area.w, [LEFT_PERCENT, 100 - LEFT_PERCENT])
    left = Rect(area.y, area.x, area.h, left_w)
    right = Rect(area.y, area.x + left_w, area.h, right_w)

    tabs_h, _ = split_percent(left.h, [TABS_PERCENT, 100 - TABS_PERCENT])
    if left.h >= 2 * MIN_TABS_H:
        tabs_h = max(MIN_TABS_H, tabs_h)
    tabs_h = clamp(tabs_h, 0, left.h)
    return Layout(
        tabs=Rect(left.y, left.x, tabs_h, left.w),
        items=Rect(left.y + tabs_h, left.x, left.h - tabs_h, left.w),
        panel=right,
    )
