"""
Lookup client: the state behind one search box.

Owns the command cache, the selection controller, the search session and
the persisted preferences, and turns key/pointer input into their events.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Optional

from ..config import STORAGE_KEY_THEME, settings
from ..logging_utils import now_ms, setup_logger
from ..presentation.html_renderer import THEMES, HtmlRenderer
from ..presentation.presenters import create_presenter, strip_ansi
from .command_cache import CommandCache
from .errors import SearchError
from .history import History
from .relay_client import RelayClient
from .selection import COMMIT, DISMISS, MOVE_NEXT, MOVE_PREV, SelectionController, SelectionEvent
from .session import SearchResult, SearchSession
from .storage import LocalStore
from .suggest import Suggestion, suggest

logger = setup_logger("cheatsh.client")

KEY_EVENTS = {
    "ArrowDown": MOVE_NEXT,
    "ArrowUp": MOVE_PREV,
    "Escape": DISMISS,
}


class SearchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class LookupClient:
    def __init__(
        self,
        relay: RelayClient,
        store: LocalStore,
        clock: Callable[[], int] = now_ms,
    ):
        self.relay = relay
        self.store = store
        self.clock = clock

        self.cache = CommandCache(store, relay)
        self.history = History(store)
        self.selection = SelectionController()
        self.session = SearchSession(relay, self.history)

        self.query = ""
        self.state = SearchState.IDLE
        self.result: Optional[SearchResult] = None
        self.error_message: Optional[str] = None
        self.theme = self._load_theme()

    # Startup

    def start(self) -> Optional[asyncio.Task]:
        """Kick off a background command listing refresh if the cache is stale."""
        return self.cache.refresh_if_stale(self.clock())

    # Input

    def input_changed(self, text: str) -> tuple[Suggestion, ...]:
        """Recompute suggestions for the new input text and reset the highlight."""
        self.query = text
        self.selection.dispatch(SelectionEvent.query_changed(suggest(text, self.cache.get())))
        return self.selection.suggestions

    async def press_key(self, key: str) -> Optional[SearchResult]:
        """Handle a key pressed in the search box.

        Enter accepts the highlighted suggestion when the dropdown is showing,
        otherwise it searches for the typed text as is.
        """
        if key == "Enter":
            if self.selection.can_commit:
                accepted = self.selection.dispatch(COMMIT)
                return await self.search(accepted.text)
            self.selection.dispatch(DISMISS)
            return await self.search(self.query)

        event = KEY_EVENTS.get(key)
        if event is not None:
            self.selection.dispatch(event)
        return None

    async def choose_suggestion(self, index: int) -> Optional[SearchResult]:
        """Pointer click on the suggestion at index."""
        accepted = self.selection.choose(index)
        if accepted is None:
            return None
        return await self.search(accepted.text)

    def click_outside(self) -> None:
        self.selection.dispatch(DISMISS)

    def clear_input(self) -> None:
        self.query = ""
        self.selection.dispatch(DISMISS)

    # Search

    async def search(self, query: str) -> Optional[SearchResult]:
        """Submit query and update the view state.

        Returns the result only when it is the one now on display; responses
        to superseded submissions are dropped.
        """
        query = (query or "").strip()
        if not query:
            return None

        self.query = query
        self.state = SearchState.LOADING
        self.error_message = None

        try:
            result = await self.session.submit(query)
        except SearchError as e:
            if self.session.is_current(e.token):
                self.state = SearchState.ERROR
                self.error_message = e.message or "Search failed"
            else:
                logger.debug(f"Dropping error for superseded query '{e.query}'")
            return None

        if result is None:
            return None
        if not self.session.is_current(result.token):
            logger.debug(f"Dropping superseded result for '{result.query}'")
            return None

        self.state = SearchState.SUCCESS
        self.result = result
        return result

    async def search_history(self, query: str) -> Optional[SearchResult]:
        """Re-run a history chip."""
        return await self.search(query)

    def clear_history(self) -> None:
        self.history.clear()

    def copy_text(self) -> str:
        """Current result as plain text, for the clipboard."""
        if self.result is None:
            return ""
        return strip_ansi(self.result.text)

    # Theme

    def _load_theme(self) -> str:
        saved = self.store.get_item(STORAGE_KEY_THEME)
        if saved in THEMES:
            return saved
        return settings.css_theme if settings.css_theme in THEMES else "light"

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.theme = theme
        self.store.set_item(STORAGE_KEY_THEME, theme)

    def toggle_theme(self) -> str:
        self.set_theme("light" if self.theme == "dark" else "dark")
        return self.theme

    # Rendering

    def renderer(self) -> HtmlRenderer:
        return HtmlRenderer(theme=self.theme)

    def render_suggestions(self) -> str:
        if not self.selection.visible:
            return ""
        return self.renderer().render_suggestions(
            self.selection.suggestions, self.selection.highlighted_index
        )

    def render_history(self) -> str:
        return self.renderer().render_history(self.history.entries)

    def render_page(self) -> str:
        """Full HTML page for whatever the results area currently shows."""
        if self.state == SearchState.ERROR:
            body = create_presenter('error').to_markdown(self.error_message or "", self.query)
        elif self.state == SearchState.SUCCESS and self.result is not None:
            body = create_presenter('sheet').to_markdown(self.result.text, self.result.query)
        else:
            body = create_presenter('history').to_markdown(self.history.entries)
        return self.renderer().render(body, title=self.query or "cheat.sh")
