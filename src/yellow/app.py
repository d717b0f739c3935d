"""Browse/edit state machine for the memo UI.

``YellowApp.update`` consumes one event at a time and may return a command:
a zero-argument callable that does blocking I/O and returns the event that
reports its outcome. The front end runs commands off the main loop and feeds
their results back through ``update``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from .models import Memo, MemoData, create_draft, sort_newest_first
from .storage import Storage, StorageError
from .widgets import FilterState, MemoList, TextArea

logger = logging.getLogger(__name__)

QUIT_KEYS = ("ctrl+c", "q")
EDIT_QUIT_KEY = "ctrl+c"
NEW_KEY = "tab"
DELETE_KEYS = ("delete", "backspace")
SELECT_KEY = "enter"
CANCEL_KEY = "esc"
SAVE_KEY = "esc"

# Fixed chrome around the components: frame padding, editor title, help line
FRAME_WIDTH = 4
FRAME_HEIGHT = 2
TITLE_HEIGHT = 2
HELP_HEIGHT = 2
EDITOR_GUTTER = 4


class Mode(Enum):
    BROWSING = "browsing"
    EDITING = "editing"


@dataclass
class KeyPressed:
    key: str


@dataclass
class Resized:
    width: int
    height: int


@dataclass
class LoadCompleted:
    data: Optional[MemoData] = None
    error: Optional[Exception] = None


@dataclass
class SaveCompleted:
    error: Optional[Exception] = None


Event = Union[KeyPressed, Resized, LoadCompleted, SaveCompleted]
Command = Callable[[], Event]


def load_memos(storage: Storage) -> Command:
    def command() -> LoadCompleted:
        try:
            return LoadCompleted(data=storage.load())
        except StorageError as e:
            return LoadCompleted(error=e)
    return command


def save_memos(storage: Storage, data: MemoData) -> Command:
    """Command that writes ``data``; pass a snapshot, not the live collection."""
    def command() -> SaveCompleted:
        try:
            storage.save(data)
        except StorageError as e:
            return SaveCompleted(error=e)
        return SaveCompleted()
    return command


@dataclass
class Session:
    """Per-run UI state. Never persisted."""

    mode: Mode = Mode.BROWSING
    memo: Optional[Memo] = None
    is_new: bool = False
    was_filtered: bool = False
    saved_filter: str = ""


class YellowApp:
    """Owns the memo collection and routes input between list and editor."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self.data = MemoData()
        self.session = Session()
        self.list = MemoList()
        self.editor = TextArea()
        self.width = 0
        self.height = 0
        self.status = ""
        self.quitting = False

    @property
    def mode(self) -> Mode:
        return self.session.mode

    def init(self) -> Command:
        return load_memos(self.storage)

    def update(self, event: Event) -> Optional[Command]:
        if isinstance(event, LoadCompleted):
            self._on_load(event)
            return None
        if isinstance(event, SaveCompleted):
            if event.error is not None:
                logger.error("Error saving: %s", event.error)
            return None
        if isinstance(event, Resized):
            self.width, self.height = event.width, event.height
            self.resize_components()
            return None
        if isinstance(event, KeyPressed):
            if self.session.mode is Mode.BROWSING:
                return self._handle_list_key(event.key)
            return self._handle_edit_key(event.key)
        return None

    def _on_load(self, event: LoadCompleted) -> None:
        if event.error is not None:
            logger.error("Error loading: %s", event.error)
            self.status = f"Could not load memos: {event.error}"
            return
        self.data = event.data or MemoData()
        sort_newest_first(self.data.active)
        self.list.set_items(self.data.active)
        logger.info(
            "Loaded %d memo(s), %d in trash", len(self.data.active), len(self.data.deleted)
        )

    # ── Key handling ──────────────────────────────────────────

    def _handle_list_key(self, key: str) -> Optional[Command]:
        state = self.list.filter_state

        if state is FilterState.FILTERING:
            self.list.handle_key(key)
            if key == CANCEL_KEY:
                self.list.reset_filter()
            return None

        if state is FilterState.FILTER_APPLIED:
            if key == CANCEL_KEY:
                self.list.reset_filter()
                return None
            if key == SELECT_KEY and self.list.visible_items:
                return self.edit_selected()
            self.list.handle_key(key)
            return None

        if key in QUIT_KEYS:
            self.quitting = True
            return None
        if key == NEW_KEY:
            return self.create_new()
        if key in DELETE_KEYS and self.data.active:
            return self.delete_selected()
        if key == SELECT_KEY and self.data.active:
            return self.edit_selected()

        self.list.handle_key(key)
        return None

    def _handle_edit_key(self, key: str) -> Optional[Command]:
        if key == SAVE_KEY:
            return self.save_and_exit()
        if key == EDIT_QUIT_KEY:
            # Exit without committing the open memo
            self.quitting = True
            return None
        self.editor.handle_key(key)
        return None

    # ── Transitions ───────────────────────────────────────────

    def create_new(self) -> None:
        self._open_editor(create_draft(), is_new=True)

    def edit_selected(self) -> None:
        memo = self.list.selected_item()
        if memo is None:
            return
        self._open_editor(memo.model_copy(), is_new=False)

    def _open_editor(self, memo: Memo, is_new: bool) -> None:
        self._save_filter_state()
        self.session.memo = memo
        self.session.is_new = is_new
        self.session.mode = Mode.EDITING
        self.editor.set_value(memo.content)
        self.editor.focus()
        self.resize_components()

    def delete_selected(self) -> Optional[Command]:
        memo = self.list.selected_item()
        if memo is None:
            return None
        self.data.delete(memo.id)
        self.list.set_items(self.data.active)
        return save_memos(self.storage, self.data.snapshot())

    def save_and_exit(self) -> Command:
        content = self.editor.value
        memo = self.session.memo

        if memo is not None:
            if self.session.is_new:
                self.data.commit_new(memo, content)
            else:
                self.data.commit_edit(memo.id, content)

        self.list.set_items(self.data.active)
        self._restore_filter_state()

        self.session.mode = Mode.BROWSING
        self.session.memo = None
        self.session.is_new = False
        self.editor.blur()
        self.resize_components()

        return save_memos(self.storage, self.data.snapshot())

    def _save_filter_state(self) -> None:
        if self.list.filter_state is FilterState.FILTER_APPLIED:
            self.session.was_filtered = True
            self.session.saved_filter = self.list.filter_value

    def _restore_filter_state(self) -> None:
        if self.session.was_filtered and self.session.saved_filter:
            self.list.set_filter_text(self.session.saved_filter)
        self.session.was_filtered = False
        self.session.saved_filter = ""

    # ── Layout ────────────────────────────────────────────────

    def resize_components(self) -> None:
        if self.width == 0 or self.height == 0:
            return
        self.list.set_size(
            self.width - FRAME_WIDTH,
            self.height - FRAME_HEIGHT - HELP_HEIGHT,
        )
        self.editor.set_width(self.width - FRAME_WIDTH - EDITOR_GUTTER)
        self.editor.set_height(self.height - FRAME_HEIGHT - TITLE_HEIGHT - HELP_HEIGHT)

    def title_text(self) -> str:
        return "New Memo" if self.session.is_new else "Edit Memo"

    def help_text(self) -> str:
        if self.session.mode is Mode.EDITING:
            return "Esc: save changes • Ctrl+C: quit without saving"

        state = self.list.filter_state
        if state is FilterState.FILTERING:
            return "Esc: cancel filter • Enter: apply filter"
        if state is FilterState.FILTER_APPLIED:
            return "Enter: edit • Esc: return to list view"
        if self.data.active:
            return "Tab: new • Enter: edit • Delete: delete • ↑/k up • ↓/j down • / filter • q quit"
        return "Tab: new • q quit"
