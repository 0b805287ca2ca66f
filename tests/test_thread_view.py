import pytest

from tui_thread.models import InvalidThread
from tui_thread.status_bar import StatusBar
from tui_thread.thread_view import ThreadView

from tests.helpers import FakeCanvas, FakeClient, FakeOpener, NOW, nested_tree, node, tree_of, wide_tree


def make_view(tree=None, opener=None):
    tree = tree or wide_tree()
    client = FakeClient({tree.thread_id: tree})
    return ThreadView(tree.thread_id, client, opener=opener or FakeOpener(), status_bar=StatusBar())


def flat_tree(size):
    return tree_of(*[node(f"m{i}") for i in range(size)])


def test_unknown_thread_raises_invalid_thread():
    client = FakeClient({})

    with pytest.raises(InvalidThread) as excinfo:
        ThreadView("nonexistent", client)

    assert excinfo.value.thread_id == "nonexistent"
    assert client.lookups == ["nonexistent"]


def test_line_count_is_backend_total():
    view = make_view(tree_of(node("A"), total=1))

    assert view.line_count() == 1
    assert make_view().line_count() == 14


def test_status_reports_position():
    view = make_view(nested_tree())
    view.selected_index = 2

    assert view.status() == ["thread-id: 0001", "message 3 of 4"]


def test_update_clears_and_draws_selection():
    view = make_view(nested_tree())
    view.selected_index = 3
    canvas = FakeCanvas(height=10)

    visited = view.update(canvas, now=NOW)

    assert visited == 4
    assert canvas.erased == 1
    assert canvas.row_text(3).startswith("  └> D")
    assert 3 in canvas.row_attrs


def test_update_on_empty_canvas_keeps_line_count():
    view = make_view()
    canvas = FakeCanvas(height=0)

    assert view.update(canvas, now=NOW) == 0
    assert view.line_count() == 14


def test_selected_message_follows_traversal():
    view = make_view(nested_tree())
    view.selected_index = 3

    assert view.selected_message().id == "D"


def test_open_selected_hands_id_to_opener():
    opener = FakeOpener()
    view = make_view(nested_tree(), opener=opener)
    view.selected_index = 2

    assert view.open_selected() is True
    assert opener.opened == ["C"]


def test_open_selected_missing_message_sets_status():
    opener = FakeOpener(missing=["B"])
    view = make_view(nested_tree(), opener=opener)
    view.selected_index = 1

    assert view.open_selected() is False
    assert opener.opened == []
    assert "B" in view.status_bar.message
    assert view.status() == ["thread-id: 0001", "message 2 of 4"]


def test_moving_past_last_visible_line_scrolls_by_overflow():
    view = make_view(flat_tree(10))
    height = 3

    for _ in range(3):
        view.select_next(height)

    assert view.selected_index == 3
    assert view.offset == 1

    view.move_selection(4, height)

    assert view.selected_index == 7
    assert view.offset == 5


def test_moving_above_first_visible_line_scrolls_back():
    view = make_view(flat_tree(10))
    view.go_bottom(3)

    assert (view.selected_index, view.offset) == (9, 7)

    view.move_selection(-4, 3)

    assert (view.selected_index, view.offset) == (5, 5)

    view.select_previous(3)

    assert (view.selected_index, view.offset) == (4, 4)


def test_selection_is_clamped_to_thread():
    view = make_view(flat_tree(4))

    view.select_previous(3)
    assert view.selected_index == 0

    view.page_down(3)
    view.page_down(3)
    assert view.selected_index == 3
    assert view.offset <= view.selected_index < view.offset + 3

    view.go_top(3)
    assert (view.selected_index, view.offset) == (0, 0)


def test_scroll_drags_selection_along():
    view = make_view(flat_tree(10))

    view.scroll(4, 3)

    assert view.offset == 4
    assert view.selected_index == 4

    view.scroll(100, 3)

    assert view.offset == 7
    assert view.selected_index == 7


def test_refresh_keeps_selected_message():
    tree = nested_tree()
    client = FakeClient({"0001": tree})
    view = ThreadView("0001", client)
    view.selected_index = 2

    client.trees["0001"] = tree_of(node("A", [node("X"), node("B"), node("C", [node("D")])]))
    view.refresh()

    assert view.line_count() == 5
    assert view.selected_message().id == "C"
    assert view.selected_index == 3


def test_refresh_failure_keeps_old_tree():
    client = FakeClient({"0001": nested_tree()})
    view = ThreadView("0001", client)
    del client.trees["0001"]

    view.refresh()

    assert view.line_count() == 4
    assert "Cannot refresh thread" in view.status_bar.message


def test_count_mismatch_fails_at_construction():
    client = FakeClient({"0001": tree_of(node("A"), total=3)})

    with pytest.raises(InvalidThread) as excinfo:
        ThreadView("0001", client)

    assert excinfo.value.thread_id == "0001"
    assert "reports 3 messages but holds 1" in str(excinfo.value.__cause__)


def test_refresh_to_mismatched_tree_keeps_old_tree():
    client = FakeClient({"0001": nested_tree()})
    view = ThreadView("0001", client)
    view.go_bottom(10)

    client.trees["0001"] = tree_of(node("A"), total=3)
    view.refresh()

    assert view.line_count() == 4
    assert view.selected_message().id == "D"
    assert "Cannot refresh thread" in view.status_bar.message
