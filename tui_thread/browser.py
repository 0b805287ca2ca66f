class LineBrowser:
    def __init__(self) -> None:
        self.offset = 0
        self.selected_index = 0

    def line_count(self) -> int:
        raise NotImplementedError

    def move_selection(self, delta: int, height: int) -> None:
        last = self.line_count() - 1
        if last < 0:
            self.selected_index = 0
            self.offset = 0
            return
        self.selected_index = max(0, min(last, self.selected_index + delta))
        self.make_selection_visible(height)

    def select_next(self, height: int) -> None:
        self.move_selection(1, height)

    def select_previous(self, height: int) -> None:
        self.move_selection(-1, height)

    def page_down(self, height: int) -> None:
        self.move_selection(max(1, height), height)

    def page_up(self, height: int) -> None:
        self.move_selection(-max(1, height), height)

    def go_top(self, height: int) -> None:
        self.move_selection(-self.selected_index, height)

    def go_bottom(self, height: int) -> None:
        self.move_selection(self.line_count() - 1 - self.selected_index, height)

    def scroll(self, delta: int, height: int) -> None:
        max_offset = max(0, self.line_count() - max(1, height))
        self.offset = max(0, min(max_offset, self.offset + delta))
        if self.line_count() <= 0:
            return
        # keep the selection on screen by dragging it with the viewport
        rows = max(1, height)
        if self.selected_index < self.offset:
            self.selected_index = self.offset
        elif self.selected_index >= self.offset + rows:
            self.selected_index = self.offset + rows - 1

    def make_selection_visible(self, height: int) -> None:
        rows = max(1, height)
        if self.selected_index < self.offset:
            self.offset = self.selected_index
        elif self.selected_index >= self.offset + rows:
            self.offset = self.selected_index - rows + 1
        self.offset = max(0, self.offset)
