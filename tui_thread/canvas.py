import curses
import unicodedata
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from tui_thread.debug_log import DebugLogger

CUT_OFF_INDICATOR = "$"

COLOR_NAMES = {
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}


@dataclass(frozen=True)
class DrawResult:
    written: int
    cut_off: bool = False


def char_width(ch: str) -> int:
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def cell_width(text: str) -> int:
    return sum(char_width(ch) for ch in text)


def fit_cells(text: str, cells: int) -> Tuple[str, int]:
    used = 0
    end = 0
    for ch in text:
        width = char_width(ch)
        if used + width > cells:
            break
        used += width
        end += 1
    return text[:end], used


class Canvas:
    @property
    def height(self) -> int:
        raise NotImplementedError

    @property
    def width(self) -> int:
        raise NotImplementedError

    def erase(self) -> None:
        raise NotImplementedError

    def set_row_attr(self, row: int, attr: int) -> None:
        raise NotImplementedError

    def add_str(
        self,
        row: int,
        col: int,
        text: str,
        attr: int = 0,
        color: Optional[str] = None,
    ) -> DrawResult:
        raise NotImplementedError

    def add_cut_off_indicator(self, row: int) -> None:
        if self.width <= 0:
            return
        self.add_str(row, self.width - 1, CUT_OFF_INDICATOR, curses.A_BOLD, "cut_off_indicator")


class CursesCanvas(Canvas):
    def __init__(
        self,
        window,
        top: int = 0,
        rows: Optional[int] = None,
        color_pairs: Optional[Dict[str, int]] = None,
    ) -> None:
        self.window = window
        self.top = top
        self.rows = rows
        self.color_pairs = color_pairs or {}

    @property
    def height(self) -> int:
        max_y, _ = self.window.getmaxyx()
        available = max(0, max_y - self.top)
        if self.rows is None:
            return available
        return max(0, min(self.rows, available))

    @property
    def width(self) -> int:
        _, max_x = self.window.getmaxyx()
        return max_x

    def erase(self) -> None:
        for row in range(self.height):
            try:
                self.window.move(self.top + row, 0)
                self.window.clrtoeol()
            except curses.error:
                pass

    def set_row_attr(self, row: int, attr: int) -> None:
        if not 0 <= row < self.height:
            return
        try:
            self.window.chgat(self.top + row, 0, -1, attr)
        except curses.error:
            pass

    def add_str(
        self,
        row: int,
        col: int,
        text: str,
        attr: int = 0,
        color: Optional[str] = None,
    ) -> DrawResult:
        if not 0 <= row < self.height or col < 0:
            return DrawResult(0, bool(text))
        available = max(0, self.width - col)
        visible, used = fit_cells(text, available)
        cut_off = len(visible) < len(text)
        if visible:
            try:
                self.window.addstr(self.top + row, col, visible, attr | self._color_attr(color))
            except curses.error:
                # curses reports an error after writing the bottom-right cell
                pass
        return DrawResult(used, cut_off)

    def _color_attr(self, color: Optional[str]) -> int:
        if not color:
            return 0
        pair = self.color_pairs.get(color)
        if not pair:
            return 0
        return curses.color_pair(pair)


def init_color_pairs(
    palette: Dict[str, Tuple[str, str]],
    logger: Optional[DebugLogger] = None,
) -> Dict[str, int]:
    pairs: Dict[str, int] = {}
    try:
        if not curses.has_colors():
            return pairs
        curses.start_color()
    except curses.error:
        return pairs

    for number, (name, (fg, bg)) in enumerate(sorted(palette.items()), start=1):
        try:
            curses.init_pair(number, COLOR_NAMES[fg], COLOR_NAMES[bg])
        except (KeyError, curses.error) as err:
            if logger:
                logger.log("WARN", f"cannot init color {name} fg={fg} bg={bg} err={err}")
            continue
        pairs[name] = number
    return pairs
