from __future__ import annotations

import unicodedata


def clamp(n: int, lo: int, hi: int) -> int:
    if hi < lo:
        return lo
    return max(lo, min(hi, n))


def char_width(ch: str) -> int:
    # Combining marks take no cell; East Asian wide/fullwidth take two.
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def display_width(s: str) -> int:
    return sum(char_width(ch) for ch in s)


def truncate_to_width(s: str, width: int) -> str:
    """
    Cut `s` so it occupies at most `width` terminal columns.

    A wide character that would straddle the limit is dropped entirely.
    """
    if width <= 0:
        return ""
    out = []
    used = 0
    for ch in s:
        w = char_width(ch)
        if used + w > width:
            break
        out.append(ch)
        used += w
    return "".join(out)


def pad_to_width(s: str, width: int) -> str:
    s = truncate_to_width(s, width)
    return s + " " * max(0, width - display_width(s))
