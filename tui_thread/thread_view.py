import datetime
from typing import List, Optional

from tui_thread.browser import LineBrowser
from tui_thread.canvas import Canvas
from tui_thread.debug_log import DebugLogger, LogMixin
from tui_thread.models import InvalidThread, MessageNode, MessageNotFound, NotmuchError, ThreadTree
from tui_thread.render import render
from tui_thread.status_bar import StatusBar
from tui_thread.traversal import count, resolve, walk


class ThreadView(LineBrowser, LogMixin):
    def __init__(
        self,
        thread_id: str,
        client,
        opener=None,
        status_bar: Optional[StatusBar] = None,
        logger: Optional[DebugLogger] = None,
    ) -> None:
        super().__init__()
        self.thread_id = thread_id
        self.client = client
        self.opener = opener
        self.status_bar = status_bar or StatusBar(logger=logger)
        self.logger = logger
        self.tree = self._load_tree()

    def _load_tree(self) -> ThreadTree:
        try:
            tree = self.client.lookup_thread(self.thread_id)
        except NotmuchError as err:
            self._log("ERR", f"thread load failed id={self.thread_id} err={err}")
            raise InvalidThread(self.thread_id) from err

        walked = count(tree.top_level)
        if walked != tree.total_count:
            mismatch = NotmuchError(
                f"thread {self.thread_id} reports {tree.total_count} messages but holds {walked}"
            )
            self._log("ERR", str(mismatch))
            raise InvalidThread(self.thread_id) from mismatch
        self._log("STATE", f"thread loaded id={self.thread_id} total={tree.total_count}")
        return tree

    def line_count(self) -> int:
        return self.tree.total_count

    def update(self, canvas: Canvas, now: Optional[datetime.datetime] = None) -> int:
        canvas.erase()
        height = canvas.height
        visited = render(self.tree, self.offset, self.selected_index, height, canvas, now)
        assert visited <= max(0, min(self.tree.total_count, self.offset + height)), (
            f"rendered {visited} messages for a thread of {self.tree.total_count}"
        )
        return visited

    def status(self) -> List[str]:
        return [
            f"thread-id: {self.thread_id}",
            f"message {self.selected_index + 1} of {self.tree.total_count}",
        ]

    def selected_message(self) -> MessageNode:
        return resolve(self.tree, self.selected_index)

    def open_selected(self) -> bool:
        if self.tree.total_count <= 0:
            self.status_bar.display_message("No message available to open.")
            return False

        message = self.selected_message()
        self._log("ACTION", f"open_selected index={self.selected_index} id={message.id}")
        if self.opener is None:
            self.status_bar.display_message(f"Cannot open message {message.id}.")
            return False
        try:
            self.opener.open(message.id)
        except MessageNotFound as err:
            self._log("WARN", f"open_selected missing id={message.id}")
            self.status_bar.display_message(str(err))
            return False
        return True

    def refresh(self) -> None:
        selected_id = None
        if self.tree.total_count > 0:
            selected_id = self.selected_message().id

        try:
            tree = self._load_tree()
        except InvalidThread as err:
            self.status_bar.display_message(f"Cannot refresh thread: {err}")
            return
        self.tree = tree

        self.selected_index = min(self.selected_index, max(0, tree.total_count - 1))
        if selected_id is not None:
            for entry in walk(tree.top_level):
                if entry.node.id == selected_id and entry.index < tree.total_count:
                    self.selected_index = entry.index
                    break
        self.offset = min(self.offset, self.selected_index)
