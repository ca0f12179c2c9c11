"""Filename autocomplete over the active host's file list."""

from __future__ import annotations

from collections.abc import Sequence

NO_SELECTION = -1


def filter_files(files: Sequence[str], text: str) -> list[str]:
    """Return files containing text, case-insensitively, in their original order."""
    needle = text.lower()
    return [name for name in files if needle in name.lower()]


class SuggestionIndex:
    """Suggestion list and keyboard selection cursor for the filename input.

    ``cursor`` is -1 when nothing is highlighted, otherwise an index into
    ``suggestions``. Any change of the input text or the file list resets it.
    """

    def __init__(self) -> None:
        self.files: list[str] = []
        self.text = ""
        self.suggestions: list[str] = []
        self.cursor = NO_SELECTION
        self.focused = False

    @property
    def is_open(self) -> bool:
        return bool(self.suggestions)

    @property
    def current(self) -> str | None:
        if 0 <= self.cursor < len(self.suggestions):
            return self.suggestions[self.cursor]
        return None

    def update(self, files: Sequence[str], text: str) -> list[str]:
        """Recompute suggestions for text and reset the cursor.

        Nothing is suggested while the input is not focused.
        """
        self.files = list(files)
        self.text = text
        if not self.focused:
            self.close()
            return []
        self.suggestions = filter_files(self.files, text)
        self.cursor = NO_SELECTION
        return list(self.suggestions)

    def set_text(self, text: str) -> list[str]:
        return self.update(self.files, text)

    def set_files(self, files: Sequence[str]) -> None:
        """Replace the file list; suggestions are only shown while focused."""
        self.update(files, self.text)

    def move_next(self) -> None:
        if not self.suggestions:
            return
        self.cursor = (self.cursor + 1) % len(self.suggestions)

    def move_previous(self) -> None:
        if not self.suggestions:
            return
        if self.cursor <= 0:
            self.cursor = len(self.suggestions) - 1
        else:
            self.cursor -= 1

    def select(self, index: int | None = None) -> str | None:
        """Commit the suggestion at index (default: the cursor) as the input text.

        Closes the suggestion list. Returns the committed value, or None if
        index does not point at a suggestion.
        """
        if index is None:
            index = self.cursor
        if not 0 <= index < len(self.suggestions):
            return None
        value = self.suggestions[index]
        self.text = value
        self.close()
        return value

    def close(self) -> None:
        self.suggestions = []
        self.cursor = NO_SELECTION

    def focus(self) -> list[str]:
        self.focused = True
        return self.update(self.files, self.text)

    def blur(self, selected_index: int | None = None) -> str | None:
        """Leave the input, committing a pending pick before the list closes.

        A pointer pick that races the focus loss passes its index here, so the
        commit always lands first and the list closes after it.
        """
        committed = None
        if selected_index is not None:
            committed = self.select(selected_index)
        self.focused = False
        self.close()
        return committed
