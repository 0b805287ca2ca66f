import pytest

from tui_thread.message_view import MessageOpener, MessageView
from tui_thread.models import MessageNotFound
from tui_thread.notmuch import MessageContent


class DummyClient:
    def __init__(self, contents):
        self.contents = contents

    def read_message(self, message_id):
        if message_id not in self.contents:
            raise MessageNotFound(message_id)
        return self.contents[message_id]


def _content():
    return MessageContent(
        id="a@x",
        headers={"From": "Alice", "Subject": "Lunch"},
        lines=[f"line {i}" for i in range(10)],
        tags=["inbox"],
    )


def test_message_view_lines_and_title():
    view = MessageView(_content())

    assert view.lines[:4] == ["From: Alice", "Subject: Lunch", "Tags: inbox", ""]
    assert view.lines[4] == "line 0"
    assert view.title == "Email a@x (Lunch)"
    assert view.status() == ["message-id: a@x", "line 1 of 14"]


def test_message_view_scroll_is_clamped():
    view = MessageView(_content())

    view.scroll_by(-5, 4)
    assert view.scroll == 0

    view.scroll_by(100, 4)
    assert view.scroll == 10


def test_opener_loads_and_notifies():
    opened = []
    opener = MessageOpener(DummyClient({"a@x": _content()}), on_open=opened.append)

    view = opener.open("a@x")

    assert opened == [view]


def test_opener_propagates_missing_message():
    opener = MessageOpener(DummyClient({}))

    with pytest.raises(MessageNotFound):
        opener.open("gone@x")
