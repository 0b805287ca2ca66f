from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple


@dataclass(frozen=True)
class MessageNode:
    id: str
    sender: str
    date: int
    tags: FrozenSet[str] = frozenset()
    replies: Tuple["MessageNode", ...] = ()
    subject: str = ""

    @property
    def is_unread(self) -> bool:
        return "unread" in self.tags

    def sorted_tags(self) -> List[str]:
        return sorted(self.tags)


@dataclass(frozen=True)
class ThreadTree:
    thread_id: str
    top_level: Tuple[MessageNode, ...] = ()
    # reported by the backend, not recomputed by walking
    total_count: int = 0
    subject: str = field(default="", compare=False)


class NotmuchError(RuntimeError):
    pass


class ThreadNotFound(NotmuchError):
    def __init__(self, thread_id: str) -> None:
        super().__init__(f"No thread matches thread:{thread_id}")
        self.thread_id = thread_id


class MessageNotFound(NotmuchError):
    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message {message_id} no longer exists")
        self.message_id = message_id


class InvalidThread(Exception):
    def __init__(self, thread_id: str) -> None:
        super().__init__(f"Invalid thread: {thread_id}")
        self.thread_id = thread_id
