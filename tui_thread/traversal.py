"""Depth-first, pre-order, sibling-ordered walk over a thread.

The renderer and the selection resolver both consume ``walk`` so that
line ``i`` on screen and ``resolve(tree, i)`` always name the same message.
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from tui_thread.models import MessageNode, ThreadTree


@dataclass(frozen=True)
class WalkEntry:
    index: int
    node: MessageNode
    last: bool
    # one flag per ancestor: True when that ancestor was the last of its siblings
    leading: Tuple[bool, ...]

    @property
    def depth(self) -> int:
        return len(self.leading)


def _push_reversed(
    stack: List[Tuple[MessageNode, bool, Tuple[bool, ...]]],
    nodes: Sequence[MessageNode],
    leading: Tuple[bool, ...],
) -> None:
    for position in range(len(nodes) - 1, -1, -1):
        stack.append((nodes[position], position == len(nodes) - 1, leading))


def walk(top_level: Sequence[MessageNode]) -> Iterator[WalkEntry]:
    stack: List[Tuple[MessageNode, bool, Tuple[bool, ...]]] = []
    _push_reversed(stack, top_level, ())

    index = 0
    while stack:
        node, last, leading = stack.pop()
        yield WalkEntry(index, node, last, leading)
        index += 1
        if node.replies:
            _push_reversed(stack, node.replies, leading + (last,))


def count(top_level: Sequence[MessageNode]) -> int:
    return sum(1 for _ in walk(top_level))


def resolve(tree: ThreadTree, index: int) -> MessageNode:
    if index < 0 or index >= tree.total_count:
        raise IndexError(f"message index {index} outside [0, {tree.total_count})")

    for entry in walk(tree.top_level):
        if entry.index == index:
            return entry.node

    # total_count promised more messages than the tree holds
    raise IndexError(f"message index {index} past the end of thread {tree.thread_id}")
