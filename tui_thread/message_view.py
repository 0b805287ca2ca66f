from typing import Callable, List, Optional

from tui_thread.debug_log import DebugLogger, LogMixin
from tui_thread.notmuch import MessageContent


class MessageView:
    def __init__(self, content: MessageContent) -> None:
        self.content = content
        self.lines = self._build_lines(content)
        self.scroll = 0

    @property
    def title(self) -> str:
        subject = self.content.headers.get("Subject", "")
        return f"Email {self.content.id}" + (f" ({subject})" if subject else "")

    @staticmethod
    def _build_lines(content: MessageContent) -> List[str]:
        lines = [f"{name}: {value}" for name, value in content.headers.items()]
        if content.tags:
            lines.append(f"Tags: {' '.join(content.tags)}")
        lines.append("")
        lines.extend(content.lines)
        return lines

    def scroll_by(self, delta: int, height: int) -> None:
        max_scroll = max(0, len(self.lines) - max(1, height))
        self.scroll = max(0, min(max_scroll, self.scroll + delta))

    def status(self) -> List[str]:
        return [f"message-id: {self.content.id}", f"line {self.scroll + 1} of {len(self.lines)}"]


class MessageOpener(LogMixin):
    def __init__(
        self,
        client,
        on_open: Optional[Callable[[MessageView], None]] = None,
        logger: Optional[DebugLogger] = None,
    ) -> None:
        self.client = client
        self.on_open = on_open
        self.logger = logger

    def open(self, message_id: str) -> MessageView:
        content = self.client.read_message(message_id)
        view = MessageView(content)
        self._log("ACTION", f"message opened id={message_id} lines={len(view.lines)}")
        if self.on_open:
            self.on_open(view)
        return view
