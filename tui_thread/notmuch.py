import json
import os
import re
import subprocess
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Dict, List, Optional, Tuple

from tui_thread.debug_log import DebugLogger, LogMixin
from tui_thread.models import (
    MessageNode,
    MessageNotFound,
    NotmuchError,
    ThreadNotFound,
    ThreadTree,
)

DISPLAY_HEADERS = ("From", "To", "Cc", "Subject", "Date")


@dataclass
class MessageContent:
    id: str
    headers: Dict[str, str] = field(default_factory=dict)
    lines: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


class _HTMLTextParser(HTMLParser):
    block_tags = {
        "p", "div", "br", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6",
        "blockquote", "title", "table", "ul", "ol",
    }
    ignore_tags = {"style", "script", "head", "meta", "link"}

    def __init__(self) -> None:
        super().__init__()
        self.parts: List[str] = []
        self.current_tag: Optional[str] = None

    def handle_starttag(self, tag, attrs):
        self.current_tag = tag
        if tag in self.block_tags:
            self.parts.append("\n")

    def handle_endtag(self, tag):
        if tag == self.current_tag:
            self.current_tag = None
        if tag in self.block_tags:
            self.parts.append("\n")

    def handle_data(self, data):
        if self.current_tag in self.ignore_tags:
            return
        clean = re.sub(r"\s+", " ", data.replace("\u00a0", " "))
        if clean:
            self.parts.append(clean)

    def get_text(self) -> str:
        return "".join(self.parts)


def html_to_text(raw: str) -> str:
    parser = _HTMLTextParser()
    parser.feed(raw)
    text = "\n".join(line.strip() for line in parser.get_text().split("\n"))
    return re.sub(r"\n{3,}", "\n\n", text).strip("\n")


class NotmuchClient(LogMixin):
    def __init__(self, binary: str = "notmuch", logger: Optional[DebugLogger] = None) -> None:
        self.binary = binary
        self.logger = logger

    def lookup_thread(self, thread_id: str) -> ThreadTree:
        query = f"thread:{thread_id}"
        self._log("ACTION", f"lookup_thread id={thread_id}")

        summary = self._run_json(
            [self.binary, "search", "--format=json", "--output=summary", query]
        )
        if not isinstance(summary, list) or len(summary) != 1:
            count = len(summary) if isinstance(summary, list) else "?"
            self._log("WARN", f"lookup_thread id={thread_id} matched={count}")
            raise ThreadNotFound(thread_id)
        entry = summary[0]
        total = int(entry.get("total", 0))

        shown = self._run_json(
            [
                self.binary,
                "show",
                "--format=json",
                "--entire-thread=true",
                "--body=false",
                query,
            ]
        )
        if not isinstance(shown, list) or not shown:
            raise ThreadNotFound(thread_id)

        top_level = self._parse_thread_nodes(shown[0])
        self._log(
            "ACTION",
            f"lookup_thread done id={thread_id} top_level={len(top_level)} total={total}",
        )
        return ThreadTree(
            thread_id=thread_id,
            top_level=top_level,
            total_count=total,
            subject=str(entry.get("subject") or ""),
        )

    def read_message(self, message_id: str) -> MessageContent:
        self._log("ACTION", f"read_message id={message_id}")
        shown = self._run_json(
            [
                self.binary,
                "show",
                "--format=json",
                "--entire-thread=false",
                "--include-html",
                f"id:{message_id}",
            ]
        )
        message = self._find_first_message(shown)
        if message is None:
            self._log("WARN", f"read_message missing id={message_id}")
            raise MessageNotFound(message_id)

        raw_headers = message.get("headers") or {}
        headers = {
            name: str(raw_headers[name])
            for name in DISPLAY_HEADERS
            if raw_headers.get(name)
        }
        lines: List[str] = []
        self._collect_body_lines(message.get("body") or [], lines)
        return MessageContent(
            id=str(message.get("id", message_id)),
            headers=headers,
            lines=lines,
            tags=sorted(str(tag) for tag in message.get("tags") or []),
        )

    def _parse_thread_nodes(self, nodes: Any) -> Tuple[MessageNode, ...]:
        parsed: List[MessageNode] = []
        if not isinstance(nodes, list):
            return ()

        for item in nodes:
            if not isinstance(item, list) or len(item) != 2:
                raise NotmuchError(f"Unexpected thread node from notmuch: {self._truncate(repr(item))}")
            message, children = item
            replies = self._parse_thread_nodes(children)
            if message is None:
                # an omitted message keeps its replies at its own position
                parsed.extend(replies)
                continue
            parsed.append(self._parse_message(message, replies))
        return tuple(parsed)

    @staticmethod
    def _parse_message(message: Dict[str, Any], replies: Tuple[MessageNode, ...]) -> MessageNode:
        headers = message.get("headers") or {}
        return MessageNode(
            id=str(message.get("id", "")),
            sender=str(headers.get("From", "")),
            date=int(message.get("timestamp") or 0),
            tags=frozenset(str(tag) for tag in message.get("tags") or []),
            replies=replies,
            subject=str(headers.get("Subject", "")),
        )

    @classmethod
    def _find_first_message(cls, node: Any) -> Optional[Dict[str, Any]]:
        if isinstance(node, dict):
            if "id" in node and "headers" in node:
                return node
            return None
        if isinstance(node, list):
            for item in node:
                found = cls._find_first_message(item)
                if found is not None:
                    return found
        return None

    @classmethod
    def _collect_body_lines(cls, parts: List[Dict[str, Any]], lines: List[str]) -> None:
        for part in parts:
            if not isinstance(part, dict):
                continue
            content_type = str(part.get("content-type", "")).lower()
            content = part.get("content")
            filename = part.get("filename")

            if isinstance(content, list):
                if content_type == "multipart/alternative":
                    plain = [p for p in content if str(p.get("content-type", "")).lower() == "text/plain"]
                    cls._collect_body_lines(plain or content[-1:], lines)
                else:
                    cls._collect_body_lines(content, lines)
                continue

            if filename or part.get("content-disposition") == "attachment":
                lines.append(f"[attachment: {filename or '(unnamed)'} ({content_type})]")
                continue

            if content_type == "text/plain" and isinstance(content, str):
                lines.extend(line.expandtabs(8) for line in content.splitlines())
            elif content_type == "text/html" and isinstance(content, str):
                lines.extend(html_to_text(content).splitlines())
            elif content_type:
                lines.append(f"[{content_type} part not shown]")

    def _run_json(self, cmd: List[str]) -> Any:
        out = self._run(cmd)
        if not out:
            return []
        try:
            return json.loads(out)
        except ValueError as err:
            self._log("ERR", f"cannot parse notmuch json err={err}")
            raise NotmuchError(f"Cannot parse notmuch output: {err}") from err

    def _run(self, cmd: List[str]) -> str:
        self._log("CMD", f"run {' '.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                env=self._env(),
            )
        except OSError as err:
            self._log("ERR", f"cannot start {cmd[0]} err={err}")
            raise NotmuchError(f"Cannot run {cmd[0]}: {err}") from err

        clean_stdout = self._sanitize_output(proc.stdout)
        clean_stderr = self._sanitize_output(proc.stderr)
        self._log(
            "CMD",
            f"rc={proc.returncode} stdout_len={len(clean_stdout)} stderr_len={len(clean_stderr)}",
        )

        if proc.returncode != 0:
            err = (clean_stderr or clean_stdout).strip()
            if not err:
                err = f"Command failed: {' '.join(cmd)}"
            self._log("ERR", f"run failed err={self._truncate(err)}")
            raise NotmuchError(err)
        return clean_stdout

    @staticmethod
    def _env() -> dict:
        env = os.environ.copy()
        env["NO_COLOR"] = "1"
        return env

    @staticmethod
    def _sanitize_output(text: Optional[str]) -> str:
        if not text:
            return ""
        ansi_escape = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
        return ansi_escape.sub("", text).strip()

    @staticmethod
    def _truncate(text: str, limit: int = 400) -> str:
        if len(text) <= limit:
            return text
        return text[: limit - 3] + "..."
