import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from tui_thread.canvas import Canvas, DrawResult, char_width, fit_cells
from tui_thread.models import MessageNode, MessageNotFound, ThreadNotFound, ThreadTree

NOW = datetime.datetime(2026, 10, 16, 12, 0, 0)
FIVE_MINUTES_AGO = int((NOW - datetime.timedelta(minutes=5)).timestamp())


class FakeCanvas(Canvas):
    def __init__(self, height: int, width: int = 80) -> None:
        self._height = height
        self._width = width
        self.grid: List[List[str]] = [[" "] * width for _ in range(max(0, height))]
        self.row_attrs: Dict[int, int] = {}
        self.colors: List[Tuple[int, int, Optional[str]]] = []
        self.rows_written = set()
        self.cut_off_rows: List[int] = []
        self.erased = 0

    @property
    def height(self) -> int:
        return self._height

    @property
    def width(self) -> int:
        return self._width

    def erase(self) -> None:
        self.erased += 1
        self.grid = [[" "] * self._width for _ in range(max(0, self._height))]
        self.row_attrs = {}
        self.rows_written = set()
        self.cut_off_rows = []

    def set_row_attr(self, row: int, attr: int) -> None:
        assert 0 <= row < self._height, f"row {row} outside canvas"
        self.row_attrs[row] = attr

    def add_str(self, row, col, text, attr=0, color=None) -> DrawResult:
        assert 0 <= row < self._height, f"row {row} outside canvas"
        self.rows_written.add(row)
        available = max(0, self._width - col)
        visible, used = fit_cells(text, available)
        cell = col
        for ch in visible:
            width = char_width(ch)
            if width == 0 and cell > col:
                self.grid[row][cell - 1] += ch
                continue
            self.grid[row][cell] = ch
            for extra in range(1, width):
                # the right half of a wide character
                self.grid[row][cell + extra] = ""
            cell += width
        if visible:
            self.colors.append((row, col, color))
        return DrawResult(used, len(visible) < len(text))

    def add_cut_off_indicator(self, row: int) -> None:
        self.cut_off_rows.append(row)
        super().add_cut_off_indicator(row)

    def row_text(self, row: int) -> str:
        return "".join(self.grid[row]).rstrip()

    def text(self) -> List[str]:
        return [self.row_text(row) for row in range(self._height)]


def node(
    node_id: str,
    replies: Sequence[MessageNode] = (),
    tags: Sequence[str] = (),
    date: int = FIVE_MINUTES_AGO,
) -> MessageNode:
    return MessageNode(
        id=node_id,
        sender=node_id,
        date=date,
        tags=frozenset(tags),
        replies=tuple(replies),
    )


def tree_of(*top_level: MessageNode, thread_id: str = "0001", total: Optional[int] = None) -> ThreadTree:
    if total is None:
        total = _count(top_level)
    return ThreadTree(thread_id=thread_id, top_level=tuple(top_level), total_count=total)


def _count(nodes: Sequence[MessageNode]) -> int:
    return sum(1 + _count(n.replies) for n in nodes)


def nested_tree() -> ThreadTree:
    # A -> [B, C -> [D]]
    return tree_of(node("A", [node("B"), node("C", [node("D")])]))


def wide_tree() -> ThreadTree:
    return tree_of(
        node("m1", [
            node("m2", [node("m3"), node("m4", [node("m5")])]),
            node("m6"),
            node("m7", [node("m8", [node("m9", [node("m10")])]), node("m11")]),
        ]),
        node("m12", [node("m13")]),
        node("m14"),
    )


class FakeClient:
    def __init__(self, trees: Dict[str, ThreadTree]) -> None:
        self.trees = dict(trees)
        self.lookups: List[str] = []

    def lookup_thread(self, thread_id: str) -> ThreadTree:
        self.lookups.append(thread_id)
        if thread_id not in self.trees:
            raise ThreadNotFound(thread_id)
        return self.trees[thread_id]


class FakeOpener:
    def __init__(self, missing: Sequence[str] = ()) -> None:
        self.missing = set(missing)
        self.opened: List[str] = []

    def open(self, message_id: str) -> None:
        if message_id in self.missing:
            raise MessageNotFound(message_id)
        self.opened.append(message_id)
