import datetime
import os
from typing import Dict, Optional


class DebugLogger:
    """Append-only debug log, enabled only when a path is given.

    Each line is ``<timestamp> [CATEGORY] key=value... message`` where the
    key/value pairs come from ``set_context`` (usually the open thread).
    """

    def __init__(self, path: Optional[str]) -> None:
        self.path = os.path.abspath(path) if path else None
        self.context: Dict[str, str] = {}
        if self.path is None:
            return
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.log("BOOT", f"debug enabled path={self.path}")

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def set_context(self, **values: str) -> None:
        for key, value in values.items():
            if value:
                self.context[key] = str(value)
            else:
                self.context.pop(key, None)

    def format_line(self, category: str, message: str, when: Optional[datetime.datetime] = None) -> str:
        stamp = (when or datetime.datetime.now()).isoformat(timespec="milliseconds")
        fields = " ".join(f"{key}={value}" for key, value in self.context.items())
        body = f"{fields} {message}" if fields else message
        return f"{stamp} [{category}] {body}".replace("\n", "\\n")

    def log(self, category: str, message: str) -> None:
        if self.path is None:
            return
        try:
            with open(self.path, "a", encoding="utf-8") as fp:
                fp.write(self.format_line(category, message) + "\n")
        except OSError:
            pass


class LogMixin:
    logger: Optional[DebugLogger] = None

    def _log(self, category: str, message: str) -> None:
        if self.logger:
            self.logger.log(category, message)
