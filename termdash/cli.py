from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from termdash import __version__
from termdash.config import DEFAULT_CONFIG, DashboardConfig
from termdash.logging_config import setup_logging
from termdash.terminal import TerminalIOError, run_in_terminal
from termdash.tui import run_dashboard


def cmd_dashboard(config: DashboardConfig = DEFAULT_CONFIG) -> int:
    try:
        run_in_terminal(lambda stdscr: run_dashboard(stdscr, config), esc_delay_ms=config.esc_timeout_ms)
    except TerminalIOError as e:
        print(f"Error: terminal failure ({e})", file=sys.stderr)
        if e.operation == "session":
            term = os.environ.get("TERM")
            if term:
                print(f"Tip: your TERM is {term!r}. If this system lacks terminfo for it, try:", file=sys.stderr)
            else:
                print("Tip: TERM is not set. Try:", file=sys.stderr)
            print("  TERM=xterm-256color termdash", file=sys.stderr)
            print("Tip: termdash needs an interactive terminal (a TTY).", file=sys.stderr)
            return 2
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="termdash",
        description=f"Terminal dashboard with tabs and a selectable list (v{__version__}). Press q to quit.",
    )
    parser.parse_args(argv)

    deferred = setup_logging()
    try:
        return cmd_dashboard()
    finally:
        # The terminal is back to normal here; emit anything logged meanwhile.
        deferred.flush()
