import curses
import datetime
from typing import List, Optional, Tuple

from tui_thread.canvas import Canvas
from tui_thread.models import ThreadTree
from tui_thread.traversal import WalkEntry, walk

VLINE = "│"
CORNER = "└"
TEE = "├"
ARROW = ">"


def relative_time(timestamp: int, now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    then = datetime.datetime.fromtimestamp(timestamp)
    delta = now - then
    seconds = int(delta.total_seconds())

    if seconds < 0:
        return then.strftime("%Y-%m-%d %H:%M")
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = seconds // 60
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"

    days = (now.date() - then.date()).days
    if days == 0 or seconds < 6 * 3600:
        hours = seconds // 3600
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return then.strftime("%A")
    if then.year == now.year:
        return then.strftime("%b %d")
    return then.strftime("%Y-%m-%d")


def leading_markers(leading: Tuple[bool, ...]) -> str:
    return "".join(" " if ancestor_last else VLINE for ancestor_last in leading)


def line_segments(
    entry: WalkEntry,
    now: Optional[datetime.datetime] = None,
) -> List[Tuple[str, Optional[str]]]:
    node = entry.node
    segments: List[Tuple[str, Optional[str]]] = [
        (leading_markers(entry.leading), "thread_view_arrow"),
        (CORNER if entry.last else TEE, "thread_view_arrow"),
        (ARROW, "thread_view_arrow"),
        (" ", None),
        (node.sender, None),
        (" ", None),
        (relative_time(node.date, now), "thread_view_date"),
    ]
    tags = " ".join(node.sorted_tags())
    if tags:
        segments.append((" ", None))
        segments.append((tags, "thread_view_tags"))
    return segments


def draw_line(
    canvas: Canvas,
    row: int,
    entry: WalkEntry,
    selected: bool,
    now: Optional[datetime.datetime] = None,
) -> bool:
    attr = 0
    if selected:
        attr |= curses.A_REVERSE
    if entry.node.is_unread:
        attr |= curses.A_BOLD
    if attr:
        canvas.set_row_attr(row, attr)

    x = 0
    for text, color in line_segments(entry, now):
        if not text:
            continue
        result = canvas.add_str(row, x, text, attr, color)
        x += result.written
        if result.cut_off:
            canvas.add_cut_off_indicator(row)
            return False
    return True


def render(
    tree: ThreadTree,
    offset: int,
    selected_index: int,
    height: int,
    canvas: Canvas,
    now: Optional[datetime.datetime] = None,
) -> int:
    """Draw the rows of ``tree`` that fall in ``[offset, offset + height)``.

    Returns the number of messages visited, which stops at the end of the
    visible window rather than at the end of the thread.
    """
    visited = 0
    if height <= 0:
        return visited

    window_end = offset + height
    for entry in walk(tree.top_level):
        if entry.index >= window_end:
            break
        visited += 1
        if entry.index < offset:
            continue
        draw_line(canvas, entry.index - offset, entry, entry.index == selected_index, now)
    return visited
