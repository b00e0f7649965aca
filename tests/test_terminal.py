import os
import unittest
from unittest import mock

import curses

from termdash import terminal
from termdash.terminal import (
    ESC_DELAY_MS,
    TerminalIOError,
    _is_xterm_like,
    _session,
    force_exit_alternate_screen,
    restore_termios,
    run_in_terminal,
    show_cursor,
)


class TestTerminalIOError(unittest.TestCase):
    def test_carries_operation(self) -> None:
        e = TerminalIOError("nope", operation="draw")
        self.assertEqual(e.operation, "draw")
        self.assertEqual(str(e), "draw: nope")

    def test_is_not_a_curses_error(self) -> None:
        self.assertFalse(issubclass(TerminalIOError, curses.error))


class TestAlternateScreen(unittest.TestCase):
    def test_is_xterm_like(self) -> None:
        self.assertTrue(_is_xterm_like("xterm-256color"))
        self.assertTrue(_is_xterm_like("screen"))
        self.assertTrue(_is_xterm_like("tmux-256color"))
        self.assertTrue(_is_xterm_like("wezterm"))
        self.assertFalse(_is_xterm_like("linux"))
        self.assertFalse(_is_xterm_like("vt100"))
        self.assertFalse(_is_xterm_like(""))

    def test_force_exit_alternate_screen_prefers_rmcup(self) -> None:
        with mock.patch.object(curses, "tigetstr", return_value=b"RM"), mock.patch(
            "termdash.terminal._write_stdout_bytes"
        ) as write, mock.patch("sys.stdout.isatty", return_value=True):
            force_exit_alternate_screen()
        write.assert_called_once_with(b"RM")

    def test_force_exit_alternate_screen_fallback(self) -> None:
        with mock.patch.object(curses, "tigetstr", return_value=None), mock.patch(
            "termdash.terminal._write_stdout_bytes"
        ) as write, mock.patch.dict("os.environ", {"TERM": "xterm-256color"}), mock.patch(
            "sys.stdout.isatty", return_value=True
        ):
            force_exit_alternate_screen()
        write.assert_called_once_with(b"\x1b[?1049l")

    def test_force_exit_alternate_screen_tigetstr_error_uses_fallback(self) -> None:
        with mock.patch.object(curses, "tigetstr", side_effect=curses.error("no setupterm")), mock.patch(
            "termdash.terminal._write_stdout_bytes"
        ) as write, mock.patch.dict("os.environ", {"TERM": "xterm"}), mock.patch("sys.stdout.isatty", return_value=True):
            force_exit_alternate_screen()
        write.assert_called_once_with(b"\x1b[?1049l")

    def test_force_exit_alternate_screen_no_tty(self) -> None:
        with mock.patch.object(curses, "tigetstr", return_value=b"RM"), mock.patch(
            "sys.stdout.isatty", return_value=False
        ), mock.patch("os.write") as os_write:
            force_exit_alternate_screen()
        os_write.assert_not_called()

    def test_force_exit_alternate_screen_no_fallback(self) -> None:
        with mock.patch.object(curses, "tigetstr", return_value=None), mock.patch(
            "termdash.terminal._write_stdout_bytes"
        ) as write, mock.patch.dict("os.environ", {"TERM": "vt100"}), mock.patch(
            "sys.stdout.isatty", return_value=True
        ):
            force_exit_alternate_screen()
        write.assert_not_called()

    def test_show_cursor_fallback_and_write_errors(self) -> None:
        with mock.patch.object(curses, "tigetstr", return_value=None), mock.patch(
            "termdash.terminal._write_stdout_bytes", side_effect=OSError("closed")
        ) as write, mock.patch.dict("os.environ", {"TERM": "xterm-256color"}), mock.patch(
            "sys.stdout.isatty", return_value=True
        ):
            # Must not raise.
            show_cursor()
        write.assert_called_once_with(b"\x1b[?25h")


class TestTermios(unittest.TestCase):
    def test_restore_termios_none_is_noop(self) -> None:
        with mock.patch("termios.tcsetattr") as tcsetattr:
            restore_termios(None)
        tcsetattr.assert_not_called()

    def test_restore_termios_swallows_errors(self) -> None:
        with mock.patch("termios.tcsetattr", side_effect=OSError("bad fd")):
            restore_termios([0, 0, 0, 0, 0, 0, []])


class _FakeStdscr:
    def __init__(self) -> None:
        self.keypad_calls = []

    def keypad(self, flag: bool) -> None:
        self.keypad_calls.append(flag)


class TestSession(unittest.TestCase):
    def test_session_sets_raw_mode_and_restores_cursor_on_error(self) -> None:
        stdscr = _FakeStdscr()

        def boom(_stdscr):
            raise TerminalIOError("x", operation="draw")

        with mock.patch.object(curses, "raw") as raw, mock.patch.object(curses, "curs_set") as curs_set, mock.patch.object(
            curses, "mousemask"
        ) as mousemask, mock.patch.object(curses, "set_escdelay"):
            with self.assertRaises(TerminalIOError):
                _session(stdscr, boom)
        raw.assert_called_once_with()
        self.assertEqual(stdscr.keypad_calls, [True])
        self.assertEqual([c.args for c in curs_set.call_args_list], [(0,), (1,)])
        self.assertEqual(mousemask.call_args_list[-1].args, (0,))

    def test_session_tolerates_missing_cursor_support(self) -> None:
        stdscr = _FakeStdscr()
        with mock.patch.object(curses, "raw"), mock.patch.object(
            curses, "curs_set", side_effect=curses.error("unsupported")
        ), mock.patch.object(curses, "mousemask"), mock.patch.object(curses, "set_escdelay"):
            self.assertEqual(_session(stdscr, lambda _s: 42), 42)

    def test_session_shortens_escape_delay_before_running(self) -> None:
        stdscr = _FakeStdscr()
        seen = []

        def fn(_stdscr):
            seen.append(escdelay.call_args_list[:])
            return None

        with mock.patch.object(curses, "raw"), mock.patch.object(curses, "curs_set"), mock.patch.object(
            curses, "mousemask"
        ), mock.patch.object(curses, "set_escdelay") as escdelay:
            _session(stdscr, fn, 25)
        self.assertEqual(seen, [[mock.call(25)]])

    def test_session_defaults_to_short_escape_delay(self) -> None:
        with mock.patch.object(curses, "raw"), mock.patch.object(curses, "curs_set"), mock.patch.object(
            curses, "mousemask"
        ), mock.patch.object(curses, "set_escdelay") as escdelay:
            _session(_FakeStdscr(), lambda _s: None)
        escdelay.assert_called_once_with(ESC_DELAY_MS)
        self.assertLess(ESC_DELAY_MS, 250)

    def test_session_tolerates_escape_delay_errors(self) -> None:
        with mock.patch.object(curses, "raw"), mock.patch.object(curses, "curs_set"), mock.patch.object(
            curses, "mousemask"
        ), mock.patch.object(curses, "set_escdelay", side_effect=curses.error("no")):
            self.assertEqual(_session(_FakeStdscr(), lambda _s: 7), 7)


class TestRunInTerminal(unittest.TestCase):
    def _patches(self, wrapper):
        return (
            mock.patch("termdash.terminal.prepare_term"),
            mock.patch("termdash.terminal.save_termios", return_value=["saved"]),
            mock.patch("termdash.terminal.restore_termios"),
            mock.patch("termdash.terminal.force_exit_alternate_screen"),
            mock.patch("termdash.terminal.show_cursor"),
            mock.patch.object(curses, "wrapper", side_effect=wrapper),
        )

    def test_returns_result_and_restores(self) -> None:
        p = self._patches(lambda func, fn, esc_delay_ms: fn("stdscr"))
        with p[0], p[1], p[2] as restore, p[3] as force_exit, p[4] as show, p[5]:
            self.assertEqual(run_in_terminal(lambda s: s + "!"), "stdscr!")
        restore.assert_called_once_with(["saved"])
        force_exit.assert_called_once_with()
        show.assert_called_once_with()

    def test_curses_setup_failure_becomes_session_error(self) -> None:
        def wrapper(func, fn, esc_delay_ms):
            raise curses.error("setupterm: could not find terminal")

        p = self._patches(wrapper)
        with p[0], p[1], p[2] as restore, p[3] as force_exit, p[4], p[5]:
            with self.assertRaises(TerminalIOError) as cm:
                run_in_terminal(lambda s: None)
        self.assertEqual(cm.exception.operation, "session")
        self.assertIn("could not find terminal", str(cm.exception))
        restore.assert_called_once_with(["saved"])
        force_exit.assert_called_once_with()

    def test_loop_errors_propagate_unchanged_after_restore(self) -> None:
        err = TerminalIOError("poll broke", operation="poll")

        def wrapper(func, fn, esc_delay_ms):
            raise err

        p = self._patches(wrapper)
        with p[0], p[1], p[2] as restore, p[3], p[4] as show, p[5]:
            with self.assertRaises(TerminalIOError) as cm:
                run_in_terminal(lambda s: None)
        self.assertIs(cm.exception, err)
        restore.assert_called_once_with(["saved"])
        show.assert_called_once_with()

    def test_passes_escape_delay_to_session(self) -> None:
        seen = []

        def wrapper(func, fn, esc_delay_ms):
            seen.append((func, esc_delay_ms))

        p = self._patches(wrapper)
        with p[0], p[1], p[2], p[3], p[4], p[5]:
            run_in_terminal(lambda s: None, esc_delay_ms=40)
        self.assertEqual(seen, [(_session, 40)])


class TestPrepareTerm(unittest.TestCase):
    def test_falls_back_when_term_has_no_terminfo(self) -> None:
        def setupterm(term=None, fd=-1):
            if term != "xterm-256color":
                raise curses.error("unknown terminal")

        with mock.patch.object(curses, "setupterm", side_effect=setupterm), mock.patch.dict(
            "os.environ", {"TERM": "fancy-term"}
        ), mock.patch("sys.stdout.fileno", return_value=1):
            terminal.prepare_term()
            self.assertEqual(os.environ["TERM"], "xterm-256color")

    def test_keeps_working_term(self) -> None:
        with mock.patch.object(curses, "setupterm") as setupterm, mock.patch.dict(
            "os.environ", {"TERM": "xterm-kitty"}
        ), mock.patch("sys.stdout.fileno", return_value=1):
            terminal.prepare_term()
            self.assertEqual(os.environ["TERM"], "xterm-kitty")
        self.assertEqual(setupterm.call_count, 1)


if __name__ == "__main__":
    unittest.main()
