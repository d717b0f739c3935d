"""Terminal-independent list and editor components.

Both components only keep state and interpret normalised key names; the
curses front end in ``yellow.tui`` draws them.
"""

from enum import Enum
from typing import Optional, Sequence

from .models import Memo

# Rows per list entry: title, description, spacer
ITEM_HEIGHT = 3
# Rows above the entries: list title (or filter prompt) and a blank line
LIST_HEADER_HEIGHT = 2


class FilterState(Enum):
    UNFILTERED = "unfiltered"
    FILTERING = "filtering"
    FILTER_APPLIED = "filter_applied"


def is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class MemoList:
    """Selectable list of memos with substring filtering."""

    def __init__(self, items: Sequence[Memo] = (), title: str = "Yellow") -> None:
        self.title = title
        self.width = 0
        self.height = 0
        self.cursor = 0
        self.filter_state = FilterState.UNFILTERED
        self._filter_text = ""
        self._items: list[Memo] = list(items)
        self._visible: list[Memo] = list(self._items)

    @property
    def filter_value(self) -> str:
        return self._filter_text

    @property
    def items(self) -> list[Memo]:
        return list(self._items)

    @property
    def visible_items(self) -> list[Memo]:
        return list(self._visible)

    def set_items(self, items: Sequence[Memo]) -> None:
        self._items = list(items)
        self._apply_filter()

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def set_filter_text(self, text: str) -> None:
        """Apply a filter as if the user had typed it and pressed enter."""
        self._filter_text = text
        self.filter_state = FilterState.FILTER_APPLIED
        self.cursor = 0
        self._apply_filter()

    def reset_filter(self) -> None:
        self._filter_text = ""
        self.filter_state = FilterState.UNFILTERED
        self.cursor = 0
        self._apply_filter()

    def selected_item(self) -> Optional[Memo]:
        if not self._visible:
            return None
        return self._visible[self.cursor]

    @property
    def items_per_page(self) -> int:
        return max(1, (self.height - LIST_HEADER_HEIGHT) // ITEM_HEIGHT)

    def page(self) -> tuple[int, list[Memo]]:
        """Index of the first entry on the cursor's page, and that page's entries."""
        per_page = self.items_per_page
        start = (self.cursor // per_page) * per_page
        return start, self._visible[start:start + per_page]

    def handle_key(self, key: str) -> None:
        if self.filter_state is FilterState.FILTERING:
            self._handle_filter_key(key)
            return

        if key == "/":
            self.filter_state = FilterState.FILTERING
            self.cursor = 0
            self._apply_filter()
        elif key in ("up", "k"):
            self._move(-1)
        elif key in ("down", "j"):
            self._move(1)
        elif key in ("pgup", "left", "h"):
            self._move(-self.items_per_page)
        elif key in ("pgdown", "right", "l"):
            self._move(self.items_per_page)
        elif key in ("home", "g"):
            self.cursor = 0
        elif key in ("end", "G"):
            self.cursor = max(0, len(self._visible) - 1)

    def _handle_filter_key(self, key: str) -> None:
        if key == "esc":
            self.reset_filter()
        elif key == "enter":
            if self._filter_text:
                self.filter_state = FilterState.FILTER_APPLIED
            else:
                self.reset_filter()
        elif key == "backspace":
            self._filter_text = self._filter_text[:-1]
            self.cursor = 0
            self._apply_filter()
        elif key == "up":
            self._move(-1)
        elif key == "down":
            self._move(1)
        elif is_text_key(key):
            self._filter_text += key
            self.cursor = 0
            self._apply_filter()

    def _apply_filter(self) -> None:
        needle = self._filter_text.lower()
        if self.filter_state is FilterState.UNFILTERED or not needle:
            self._visible = list(self._items)
        else:
            self._visible = [m for m in self._items if needle in m.filter_value.lower()]
        self._clamp()

    def _move(self, delta: int) -> None:
        self.cursor += delta
        self._clamp()

    def _clamp(self) -> None:
        self.cursor = min(max(self.cursor, 0), max(0, len(self._visible) - 1))


class TextArea:
    """Multi-line text buffer with a cursor."""

    def __init__(self, placeholder: str = "Start typing ...") -> None:
        self.placeholder = placeholder
        self.width = 80
        self.height = 6
        self.focused = False
        self.lines: list[str] = [""]
        self.row = 0
        self.col = 0
        self.offset = 0

    @property
    def value(self) -> str:
        return "\n".join(self.lines)

    def set_value(self, text: str) -> None:
        """Replace the buffer and move the cursor to the end."""
        self.lines = text.split("\n")
        self.row = len(self.lines) - 1
        self.col = len(self.lines[self.row])
        self.offset = 0
        self._scroll()

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def set_width(self, width: int) -> None:
        self.width = max(1, width)

    def set_height(self, height: int) -> None:
        self.height = max(1, height)
        self._scroll()

    def visible_lines(self) -> list[tuple[int, str]]:
        """(line index, text) pairs inside the scroll window."""
        end = self.offset + self.height
        return list(enumerate(self.lines))[self.offset:end]

    def handle_key(self, key: str) -> None:
        if not self.focused:
            return

        line = self.lines[self.row]
        if key == "enter":
            self.lines[self.row] = line[:self.col]
            self.lines.insert(self.row + 1, line[self.col:])
            self.row += 1
            self.col = 0
        elif key == "backspace":
            if self.col > 0:
                self.lines[self.row] = line[:self.col - 1] + line[self.col:]
                self.col -= 1
            elif self.row > 0:
                previous = self.lines[self.row - 1]
                self.lines[self.row - 1] = previous + line
                del self.lines[self.row]
                self.row -= 1
                self.col = len(previous)
        elif key == "delete":
            if self.col < len(line):
                self.lines[self.row] = line[:self.col] + line[self.col + 1:]
            elif self.row < len(self.lines) - 1:
                self.lines[self.row] = line + self.lines.pop(self.row + 1)
        elif key == "left":
            if self.col > 0:
                self.col -= 1
            elif self.row > 0:
                self.row -= 1
                self.col = len(self.lines[self.row])
        elif key == "right":
            if self.col < len(line):
                self.col += 1
            elif self.row < len(self.lines) - 1:
                self.row += 1
                self.col = 0
        elif key == "up":
            if self.row > 0:
                self.row -= 1
                self.col = min(self.col, len(self.lines[self.row]))
        elif key == "down":
            if self.row < len(self.lines) - 1:
                self.row += 1
                self.col = min(self.col, len(self.lines[self.row]))
        elif key == "home":
            self.col = 0
        elif key == "end":
            self.col = len(line)
        elif key == "tab":
            self._insert("    ")
        elif is_text_key(key):
            self._insert(key)
        self._scroll()

    def _insert(self, text: str) -> None:
        line = self.lines[self.row]
        self.lines[self.row] = line[:self.col] + text + line[self.col:]
        self.col += len(text)

    def _scroll(self) -> None:
        if self.row < self.offset:
            self.offset = self.row
        elif self.row >= self.offset + self.height:
            self.offset = self.row - self.height + 1
