import curses
from typing import Dict, List, Optional

from tui_thread.canvas import CursesCanvas, cell_width, fit_cells, init_color_pairs
from tui_thread.config import Config
from tui_thread.debug_log import DebugLogger, LogMixin
from tui_thread.message_view import MessageView
from tui_thread.models import NotmuchError
from tui_thread.status_bar import StatusBar
from tui_thread.thread_view import ThreadView

STATUS_ROWS = 2

KEY_NAMES = {
    -1: "NONE",
    9: "TAB",
    10: "ENTER",
    13: "ENTER",
    27: "ESC",
    curses.KEY_ENTER: "ENTER",
    curses.KEY_UP: "UP",
    curses.KEY_DOWN: "DOWN",
    curses.KEY_NPAGE: "PGDN",
    curses.KEY_PPAGE: "PGUP",
    curses.KEY_HOME: "HOME",
    curses.KEY_END: "END",
    curses.KEY_RESIZE: "RESIZE",
}

HELP_LINES = [
    "HELP - TUI Thread",
    "",
    "Thread:",
    "  j/k or arrows: move selection",
    "  PgUp/PgDn: page",
    "  g/G: first/last message",
    "  Enter: open selected message",
    "  r: reload thread",
    "",
    "Message:",
    "  j/k or arrows: scroll",
    "  PgUp/PgDn: fast scroll",
    "  b or Esc: back to thread",
    "",
    "q: quit, ?: close help",
]


class TuiThreadApp(LogMixin):
    def __init__(
        self,
        view: ThreadView,
        status_bar: StatusBar,
        config: Optional[Config] = None,
        logger: Optional[DebugLogger] = None,
    ) -> None:
        self.view = view
        self.status_bar = status_bar
        self.config = config or Config()
        self.logger = logger
        self.message_view: Optional[MessageView] = None
        self.help_visible = False
        self.color_pairs: Dict[str, int] = {}
        self.stdscr = None

    def show_message(self, message_view: MessageView) -> None:
        self.message_view = message_view
        self.status_bar.display_message(f"{message_view.title} loaded.")

    def run(self, stdscr) -> None:
        self.stdscr = stdscr
        self._log("BOOT", "tui started")
        self._hide_cursor()
        stdscr.keypad(True)
        stdscr.timeout(-1)
        self.color_pairs = init_color_pairs(self.config.colors, logger=self.logger)

        while True:
            self._draw(stdscr)
            ch = stdscr.getch()
            mode = "message" if self.message_view else "thread"
            self._log("KEY", f"mode={mode} key={self._key_name(ch)} help={self.help_visible}")
            self.status_bar.clear_message()

            if self.help_visible:
                if ch in (ord("?"), 27, curses.KEY_ENTER, 10, 13, ord("q"), ord("Q")):
                    self.help_visible = False
                continue
            if ch == ord("?"):
                self.help_visible = True
                continue
            if ch in (ord("q"), ord("Q")):
                self._log("BOOT", "tui exit requested")
                break
            if self.message_view is not None:
                self._handle_message_key(ch)
            else:
                self._handle_thread_key(ch)

    def _view_rows(self) -> int:
        if self.stdscr is None:
            return 1
        height, _ = self.stdscr.getmaxyx()
        return max(1, height - STATUS_ROWS)

    def _handle_thread_key(self, ch: int) -> None:
        rows = self._view_rows()
        if ch in (curses.KEY_UP, ord("k"), ord("K")):
            self.view.select_previous(rows)
        elif ch in (curses.KEY_DOWN, ord("j"), ord("J")):
            self.view.select_next(rows)
        elif ch == curses.KEY_NPAGE:
            self.view.page_down(rows)
        elif ch == curses.KEY_PPAGE:
            self.view.page_up(rows)
        elif ch in (curses.KEY_HOME, ord("g")):
            self.view.go_top(rows)
        elif ch in (curses.KEY_END, ord("G")):
            self.view.go_bottom(rows)
        elif ch in (curses.KEY_ENTER, 10, 13):
            self._open_selected()
        elif ch in (ord("r"), ord("R")):
            self.view.refresh()
            self.view.make_selection_visible(rows)

    def _handle_message_key(self, ch: int) -> None:
        rows = self._view_rows()
        if ch in (ord("b"), ord("B"), 27):
            self.message_view = None
            if self.config.refresh_view:
                self.view.refresh()
                self.view.make_selection_visible(rows)
            self.status_bar.display_message("Back to thread.")
        elif ch in (curses.KEY_UP, ord("k"), ord("K")):
            self.message_view.scroll_by(-1, rows)
        elif ch in (curses.KEY_DOWN, ord("j"), ord("J")):
            self.message_view.scroll_by(1, rows)
        elif ch == curses.KEY_NPAGE:
            self.message_view.scroll_by(rows, rows)
        elif ch == curses.KEY_PPAGE:
            self.message_view.scroll_by(-rows, rows)

    def _open_selected(self) -> None:
        try:
            self.view.open_selected()
        except NotmuchError as err:
            self._log("ERR", f"open_selected error err={err}")
            self.status_bar.display_message(f"Error opening message: {err}")

    def _draw(self, stdscr) -> None:
        stdscr.erase()
        height, _ = stdscr.getmaxyx()
        rows = max(0, height - STATUS_ROWS)
        canvas = CursesCanvas(stdscr, top=0, rows=rows, color_pairs=self.color_pairs)

        if self.message_view is not None:
            self._draw_message(canvas)
            view_status = self.message_view.status()
        else:
            self.view.make_selection_visible(max(1, rows))
            self.view.update(canvas)
            view_status = self.view.status()

        status_canvas = CursesCanvas(
            stdscr,
            top=rows,
            rows=min(STATUS_ROWS, height),
            color_pairs=self.color_pairs,
        )
        self._draw_status(status_canvas, self.status_bar.lines(view_status))
        if self.help_visible:
            self._draw_help_modal(CursesCanvas(stdscr, color_pairs=self.color_pairs))
        stdscr.refresh()

    def _draw_status(self, canvas: CursesCanvas, lines: List[str]) -> None:
        styles = [(curses.A_REVERSE, None), (curses.A_BOLD, "status_bar_message")]
        # with a single row left only the transient message is shown
        pairs = list(zip(lines, styles))[-canvas.height:] if canvas.height else []
        for row, (line, (attr, color)) in enumerate(pairs):
            if attr & curses.A_REVERSE:
                canvas.set_row_attr(row, attr)
            if canvas.add_str(row, 0, line, attr, color).cut_off:
                canvas.add_cut_off_indicator(row)

    def _draw_message(self, canvas: CursesCanvas) -> None:
        view = self.message_view
        view.scroll_by(0, canvas.height)
        for row, line in enumerate(view.lines[view.scroll : view.scroll + canvas.height]):
            result = canvas.add_str(row, 0, line)
            if result.cut_off:
                canvas.add_cut_off_indicator(row)

    def _draw_help_modal(self, screen: CursesCanvas) -> None:
        height, width = screen.height, screen.width
        if width < 20 or height < 8:
            screen.add_str(0, 0, "Help: terminal too small.", curses.A_REVERSE)
            return

        box_w = min(width - 4, max(cell_width(line) for line in HELP_LINES) + 4)
        box_h = min(height - 4, len(HELP_LINES) + 2)
        left = max(0, (width - box_w) // 2)
        top = max(0, (height - box_h) // 2)
        bottom = top + box_h - 1
        inner = max(0, box_w - 2)

        border = "+" + "-" * inner + "+"
        screen.add_str(top, left, border, curses.A_BOLD)
        screen.add_str(bottom, left, border, curses.A_BOLD)
        for y in range(top + 1, bottom):
            screen.add_str(y, left, "|", curses.A_BOLD)
            screen.add_str(y, left + 1, " " * inner, curses.A_REVERSE)
            screen.add_str(y, left + box_w - 1, "|", curses.A_BOLD)

        for i, line in enumerate(HELP_LINES[: box_h - 2]):
            visible, _ = fit_cells(line, box_w - 4)
            attr = curses.A_REVERSE | (curses.A_BOLD if i == 0 else 0)
            screen.add_str(top + 1 + i, left + 2, visible, attr)

    @staticmethod
    def _hide_cursor() -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            # terminals without cursor control keep their cursor
            return

    @staticmethod
    def _key_name(ch: int) -> str:
        if ch in KEY_NAMES:
            return KEY_NAMES[ch]
        if 32 <= ch <= 126:
            return chr(ch)
        return f"#{ch}"
