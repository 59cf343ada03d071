from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .suggest import Suggestion


class EventKind(str, Enum):
    QUERY_CHANGED = "query_changed"
    MOVE_NEXT = "move_next"
    MOVE_PREV = "move_prev"
    COMMIT = "commit"
    DISMISS = "dismiss"


@dataclass(frozen=True)
class SelectionEvent:
    """Input to the selection controller.

    Only QUERY_CHANGED carries a payload: the freshly computed suggestions.
    """
    kind: EventKind
    suggestions: tuple[Suggestion, ...] = ()

    @classmethod
    def query_changed(cls, suggestions: Sequence[Suggestion]) -> "SelectionEvent":
        return cls(EventKind.QUERY_CHANGED, tuple(suggestions))


MOVE_NEXT = SelectionEvent(EventKind.MOVE_NEXT)
MOVE_PREV = SelectionEvent(EventKind.MOVE_PREV)
COMMIT = SelectionEvent(EventKind.COMMIT)
DISMISS = SelectionEvent(EventKind.DISMISS)


class SelectionController:
    """Tracks which suggestion is highlighted and decides what a commit yields.

    Starts hidden with nothing highlighted. Commit and Dismiss both return the
    controller to that state; the next QUERY_CHANGED re-enters it.
    """

    def __init__(self):
        self._suggestions: tuple[Suggestion, ...] = ()
        self.highlighted_index = -1
        self.visible = False

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        return self._suggestions

    @property
    def highlighted(self) -> Optional[Suggestion]:
        if self.highlighted_index == -1:
            return None
        return self._suggestions[self.highlighted_index]

    @property
    def can_commit(self) -> bool:
        """Whether Enter should accept the highlighted suggestion rather than the raw text."""
        return self.visible and self.highlighted_index != -1

    def dispatch(self, event: SelectionEvent) -> Optional[Suggestion]:
        """Apply one event. Returns the accepted suggestion for a successful COMMIT, else None."""
        if event.kind == EventKind.QUERY_CHANGED:
            self._suggestions = event.suggestions
            self.visible = bool(self._suggestions)
            self.highlighted_index = 0 if self._suggestions else -1
            return None

        if event.kind == EventKind.MOVE_NEXT:
            self._move(1)
            return None

        if event.kind == EventKind.MOVE_PREV:
            self._move(-1)
            return None

        if event.kind == EventKind.COMMIT:
            if not self.can_commit:
                return None
            accepted = self._suggestions[self.highlighted_index]
            self._reset()
            return accepted

        if event.kind == EventKind.DISMISS:
            self._reset()
            return None

        raise ValueError(f"Unknown selection event: {event.kind}")

    def choose(self, index: int) -> Optional[Suggestion]:
        """Pointer selection: highlight the item at index and commit it."""
        if not self.visible or not 0 <= index < len(self._suggestions):
            return None
        self.highlighted_index = index
        return self.dispatch(COMMIT)

    def _move(self, step: int) -> None:
        count = len(self._suggestions)
        if not self.visible or count == 0:
            return
        self.highlighted_index = (self.highlighted_index + step + count) % count

    def _reset(self) -> None:
        self._suggestions = ()
        self.highlighted_index = -1
        self.visible = False
