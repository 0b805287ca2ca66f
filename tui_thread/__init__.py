from tui_thread.models import (
    InvalidThread,
    MessageNode,
    MessageNotFound,
    NotmuchError,
    ThreadNotFound,
    ThreadTree,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidThread",
    "MessageNode",
    "MessageNotFound",
    "NotmuchError",
    "ThreadNotFound",
    "ThreadTree",
]
