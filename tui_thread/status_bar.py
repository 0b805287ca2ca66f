from typing import List, Optional

from tui_thread.debug_log import DebugLogger, LogMixin

DIVIDER = " | "


class StatusBar(LogMixin):
    def __init__(self, logger: Optional[DebugLogger] = None) -> None:
        self.logger = logger
        self.message = ""

    def display_message(self, message: str) -> None:
        self.message = message
        self._log("STATE", f"status message={message}")

    def clear_message(self) -> None:
        self.message = ""

    def status_line(self, view_status: List[str]) -> str:
        return DIVIDER.join(part for part in view_status if part)

    def lines(self, view_status: List[str]) -> List[str]:
        return [self.status_line(view_status), self.message]
