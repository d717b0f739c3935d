"""Curses front end: key decoding, drawing and the event loop."""

import curses
import logging
import os
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Union

from .app import (
    EDITOR_GUTTER,
    FRAME_WIDTH,
    HELP_HEIGHT,
    Command,
    Event,
    KeyPressed,
    Mode,
    Resized,
    YellowApp,
)
from .widgets import ITEM_HEIGHT, FilterState

logger = logging.getLogger(__name__)

POLL_MS = 50
LEFT = FRAME_WIDTH // 2
TOP = 1

SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_PPAGE: "pgup",
    curses.KEY_NPAGE: "pgdown",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_DC: "delete",
    curses.KEY_ENTER: "enter",
}

CHAR_KEYS = {
    "\x1b": "esc",
    "\t": "tab",
    "\n": "enter",
    "\r": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
}


def normalize_key(ch: Union[str, int]) -> Optional[str]:
    """Map a curses key to the names the app understands (``"ctrl+c"``, ``"up"``, ``"a"``)."""
    if isinstance(ch, int):
        return SPECIAL_KEYS.get(ch)
    if ch in CHAR_KEYS:
        return CHAR_KEYS[ch]
    code = ord(ch)
    if code < 32:
        return f"ctrl+{chr(code + 96)}"
    return ch


@dataclass
class Theme:
    primary: int = 0
    muted: int = 0
    text: int = 0
    bold: int = 0


def init_theme() -> Theme:
    """Colour attributes; needs an initialised screen."""
    theme = Theme(bold=curses.A_BOLD)
    if curses.has_colors():
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_YELLOW, -1)
        curses.init_pair(2, curses.COLOR_WHITE, -1)
        theme.primary = curses.color_pair(1)
        theme.muted = curses.color_pair(2) | curses.A_DIM
        theme.text = curses.color_pair(2)
    return theme


def _put(screen, row: int, col: int, text: str, attr: int = 0) -> None:
    height, width = screen.getmaxyx()
    if row < 0 or row >= height or col >= width:
        return
    try:
        screen.addnstr(row, col, text, width - col - 1, attr)
    except curses.error:
        # Writing into the last cell moves the cursor off-screen
        pass


def draw(screen, app: YellowApp, theme: Theme) -> Optional[tuple[int, int]]:
    """Render the current mode.

    Returns:
        Screen position for the text cursor, or None to hide it
    """
    screen.erase()
    height, _ = screen.getmaxyx()

    if app.mode is Mode.BROWSING:
        cursor = _draw_list(screen, app, theme)
    else:
        cursor = _draw_editor(screen, app, theme)

    help_row = height - TOP - HELP_HEIGHT + 1
    if app.status:
        _put(screen, help_row - 1, LEFT, app.status, theme.primary)
    _put(screen, help_row, LEFT, app.help_text(), theme.muted)
    return cursor


def _draw_list(screen, app: YellowApp, theme: Theme) -> Optional[tuple[int, int]]:
    memo_list = app.list
    cursor = None

    if memo_list.filter_state is FilterState.FILTERING:
        prompt = "Filter: "
        _put(screen, TOP, LEFT, prompt, theme.primary | theme.bold)
        _put(screen, TOP, LEFT + len(prompt), memo_list.filter_value, theme.text)
        cursor = (TOP, LEFT + len(prompt) + len(memo_list.filter_value))
    else:
        _put(screen, TOP, LEFT, memo_list.title, theme.primary | theme.bold)
        if memo_list.filter_state is FilterState.FILTER_APPLIED:
            _put(
                screen, TOP, LEFT + len(memo_list.title) + 1,
                f"“{memo_list.filter_value}”", theme.muted,
            )

    start, page = memo_list.page()
    row = TOP + 2
    if not page:
        _put(screen, row, LEFT, "No memos.", theme.muted)
    for index, memo in enumerate(page, start=start):
        if index == memo_list.cursor:
            _put(screen, row, LEFT, "│ " + memo.title, theme.primary)
            _put(screen, row + 1, LEFT, "│ " + memo.description, theme.primary)
        else:
            _put(screen, row, LEFT, "  " + memo.title, theme.text)
            _put(screen, row + 1, LEFT, "  " + memo.description, theme.muted)
        row += ITEM_HEIGHT
    return cursor


def _draw_editor(screen, app: YellowApp, theme: Theme) -> Optional[tuple[int, int]]:
    editor = app.editor
    _put(screen, TOP, LEFT + 2, app.title_text(), theme.primary | theme.bold)

    top = TOP + 2
    gutter = EDITOR_GUTTER
    cursor = None
    for row, (index, line) in enumerate(editor.visible_lines()):
        number_attr = theme.primary | theme.bold if index == editor.row else theme.muted
        _put(screen, top + row, LEFT, f"{index + 1:>3} ", number_attr)
        shift = 0
        if index == editor.row and editor.col >= editor.width:
            shift = editor.col - editor.width + 1
        _put(screen, top + row, LEFT + gutter, line[shift:shift + editor.width], theme.text)
        if index == editor.row:
            cursor = (top + row, LEFT + gutter + editor.col - shift)

    if editor.value == "" and editor.focused:
        _put(screen, top, LEFT + gutter + 1, editor.placeholder, theme.muted)
    return cursor if editor.focused else None


def read_event(screen) -> Optional[Event]:
    try:
        ch = screen.get_wch()
    except curses.error:
        # Poll timeout with no input
        return None
    if ch == curses.KEY_RESIZE:
        height, width = screen.getmaxyx()
        return Resized(width, height)
    key = normalize_key(ch)
    return KeyPressed(key) if key else None


class EventLoop:
    """Single consumer of UI events; I/O commands run on a worker thread.

    The worker pool has one thread so saves land on disk in the order they
    were issued. The load command writes its retention cleanup on that same
    thread, so it always lands before any later save.
    """

    def __init__(self, app: YellowApp) -> None:
        self.app = app
        self.events: "queue.Queue[Event]" = queue.Queue()
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="yellow-io")

    def dispatch(self, command: Command) -> None:
        future = self._pool.submit(command)
        future.add_done_callback(self._deliver)

    def _deliver(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Background command failed", exc_info=error)
            return
        self.events.put(future.result())

    def process_pending(self) -> None:
        """Feed every queued event to the app, one at a time."""
        while not self.app.quitting:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            command = self.app.update(event)
            if command is not None:
                self.dispatch(command)

    def close(self) -> None:
        """Wait for in-flight saves."""
        self._pool.shutdown(wait=True)

    def run(self, screen) -> None:
        curses.raw()
        screen.keypad(True)
        screen.timeout(POLL_MS)
        theme = init_theme()

        height, width = screen.getmaxyx()
        self.events.put(Resized(width, height))
        self.dispatch(self.app.init())

        try:
            while not self.app.quitting:
                self.process_pending()
                if self.app.quitting:
                    break
                cursor = draw(screen, self.app, theme)
                height, width = screen.getmaxyx()
                if cursor is not None and cursor[0] < height and cursor[1] < width:
                    curses.curs_set(1)
                    screen.move(*cursor)
                else:
                    curses.curs_set(0)
                screen.refresh()
                event = read_event(screen)
                if event is not None:
                    self.events.put(event)
        finally:
            self.close()


def run(app: YellowApp) -> None:
    """Take over the terminal until the user quits."""
    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(EventLoop(app).run)
