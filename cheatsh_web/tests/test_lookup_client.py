import asyncio

import pytest

from cheatsh.config import STORAGE_KEY_THEME
from cheatsh.lookup.client import LookupClient, SearchState
from cheatsh.lookup.errors import TransportError

NOW = 1_700_000_000_000


@pytest.fixture
def client(fake_relay, store, seed_commands):
    seed_commands(["tar", "tail", "tac"], NOW)
    return LookupClient(fake_relay, store, clock=lambda: NOW)


def texts(suggestions):
    return [s.text for s in suggestions]


class TestTyping:
    def test_typing_ranks_cached_commands(self, client):
        assert texts(client.input_changed("ta")) == ["tac", "tar", "tail"]
        assert client.selection.highlighted_index == 0

    def test_clearing_input_hides_suggestions(self, client):
        client.input_changed("ta")
        assert texts(client.input_changed("")) == []
        assert client.selection.visible is False
        assert client.selection.highlighted_index == -1

    def test_fresh_cache_is_not_refreshed_on_start(self, client, fake_relay):
        assert client.start() is None
        assert fake_relay.calls == []

    @pytest.mark.asyncio
    async def test_start_refreshes_empty_cache(self, fake_relay, store):
        fake_relay.responses[":list"] = "git\ngitk\nmagit\n"
        client = LookupClient(fake_relay, store, clock=lambda: NOW)
        assert texts(client.input_changed("git")) == []
        await client.start()
        assert texts(client.input_changed("git")) == ["git", "gitk", "magit"]


class TestKeys:
    @pytest.mark.asyncio
    async def test_enter_commits_highlighted_suggestion(self, client, fake_relay):
        fake_relay.responses["tar"] = "tar -xvf archive.tar"
        client.input_changed("ta")
        await client.press_key("ArrowDown")

        result = await client.press_key("Enter")

        assert result.query == "tar"
        assert fake_relay.calls == ["tar"]
        assert client.query == "tar"
        assert client.state == SearchState.SUCCESS
        assert client.history.entries == ("tar",)
        assert client.selection.visible is False

    @pytest.mark.asyncio
    async def test_arrow_up_wraps_to_last(self, client, fake_relay):
        fake_relay.responses["tail"] = "tail -f log"
        client.input_changed("ta")
        await client.press_key("ArrowUp")
        result = await client.press_key("Enter")
        assert result.query == "tail"

    @pytest.mark.asyncio
    async def test_enter_without_suggestions_submits_raw_text(self, client, fake_relay):
        fake_relay.responses["rsync"] = "rsync -av src dst"
        client.input_changed("rsync")
        assert client.selection.visible is False

        result = await client.press_key("Enter")

        assert result.text == "rsync -av src dst"
        assert fake_relay.calls == ["rsync"]

    @pytest.mark.asyncio
    async def test_enter_after_escape_submits_typed_text(self, client, fake_relay):
        fake_relay.responses["ta"] = "no such sheet, but some text"
        client.input_changed("ta")
        await client.press_key("Escape")
        assert client.selection.visible is False

        await client.press_key("Enter")
        assert fake_relay.calls == ["ta"]

    @pytest.mark.asyncio
    async def test_blank_enter_does_nothing(self, client, fake_relay):
        client.input_changed("   ")
        assert await client.press_key("Enter") is None
        assert fake_relay.calls == []
        assert client.state == SearchState.IDLE

    @pytest.mark.asyncio
    async def test_unknown_keys_are_ignored(self, client):
        client.input_changed("ta")
        assert await client.press_key("a") is None
        assert client.selection.highlighted_index == 0

    @pytest.mark.asyncio
    async def test_click_on_suggestion_searches_it(self, client, fake_relay):
        fake_relay.responses["tail"] = "tail -n 20"
        client.input_changed("ta")
        result = await client.choose_suggestion(2)
        assert result.query == "tail"

    def test_click_outside_dismisses(self, client):
        client.input_changed("ta")
        client.click_outside()
        assert client.selection.visible is False

    def test_clear_input(self, client):
        client.input_changed("ta")
        client.clear_input()
        assert client.query == ""
        assert client.selection.visible is False


class TestSearchStates:
    @pytest.mark.asyncio
    async def test_not_found_sets_error_message(self, client, fake_relay):
        fake_relay.responses["zzz"] = ""
        assert await client.search("zzz") is None
        assert client.state == SearchState.ERROR
        assert client.error_message == "No results found"
        assert client.history.entries == ()

    @pytest.mark.asyncio
    async def test_transport_error_message(self, client, fake_relay):
        fake_relay.responses["tar"] = TransportError("HTTP 500")
        await client.search("tar")
        assert client.state == SearchState.ERROR
        assert client.error_message == "HTTP 500"

    @pytest.mark.asyncio
    async def test_error_is_recoverable(self, client, fake_relay):
        fake_relay.responses["tar"] = TransportError("HTTP 500")
        await client.search("tar")
        fake_relay.responses["tar"] = "tar -c"
        result = await client.search("tar")
        assert result.text == "tar -c"
        assert client.state == SearchState.SUCCESS
        assert client.error_message is None

    @pytest.mark.asyncio
    async def test_last_issued_search_wins(self, client, fake_relay):
        fake_relay.responses.update({"slow": "slow sheet", "fast": "fast sheet"})
        gate = fake_relay.hold("slow")

        slow = asyncio.ensure_future(client.search("slow"))
        await asyncio.sleep(0)
        fast = await client.search("fast")
        gate.set()
        stale = await slow

        assert fast.query == "fast"
        assert stale is None
        assert client.result.query == "fast"
        assert client.state == SearchState.SUCCESS

    @pytest.mark.asyncio
    async def test_superseded_error_is_not_shown(self, client, fake_relay):
        fake_relay.responses.update({"slow": TransportError("HTTP 502"), "fast": "fast sheet"})
        gate = fake_relay.hold("slow")

        slow = asyncio.ensure_future(client.search("slow"))
        await asyncio.sleep(0)
        await client.search("fast")
        gate.set()
        await slow

        assert client.state == SearchState.SUCCESS
        assert client.error_message is None

    @pytest.mark.asyncio
    async def test_history_chip_reruns_search(self, client, fake_relay):
        fake_relay.responses["tar"] = "tar"
        await client.search("tar")
        client.input_changed("something else")
        await client.search_history("tar")
        assert client.query == "tar"
        assert fake_relay.calls == ["tar", "tar"]

    @pytest.mark.asyncio
    async def test_copy_text_strips_ansi(self, client, fake_relay):
        fake_relay.responses["tar"] = "\x1b[38;5;246m# extract\x1b[0m\ntar -xf a.tar"
        assert client.copy_text() == ""
        await client.search("tar")
        assert client.copy_text() == "# extract\ntar -xf a.tar"

    def test_clear_history(self, client):
        client.history.add("tar")
        client.clear_history()
        assert client.history.entries == ()


class TestThemeAndRendering:
    def test_theme_toggle_persists(self, client, store, fake_relay):
        start = client.theme
        toggled = client.toggle_theme()
        assert toggled != start
        assert store.get_item(STORAGE_KEY_THEME) == toggled
        assert LookupClient(fake_relay, store).theme == toggled

    def test_invalid_saved_theme_falls_back(self, fake_relay, store):
        store.set_item(STORAGE_KEY_THEME, "neon")
        assert LookupClient(fake_relay, store).theme in ("light", "dark")

    def test_set_unknown_theme_rejected(self, client):
        with pytest.raises(ValueError):
            client.set_theme("neon")

    def test_suggestion_markup_highlights_and_escapes(self, fake_relay, store, seed_commands):
        seed_commands(["<ta>", "tac"], NOW)
        client = LookupClient(fake_relay, store, clock=lambda: NOW)
        client.input_changed("ta")
        html = client.render_suggestions()
        assert '<button class="autocomplete-item selected" data-val="tac"><strong>ta</strong>c</button>' in html
        assert "&lt;<strong>ta</strong>&gt;" in html
        assert "<ta>" not in html

    def test_no_markup_when_hidden(self, client):
        assert client.render_suggestions() == ""

    def test_history_chips(self, client):
        client.history.add('a"b')
        assert client.render_history() == '<button class="chip" data-query="a&quot;b">a&quot;b</button>'

    @pytest.mark.asyncio
    async def test_page_shows_result_or_error(self, client, fake_relay):
        fake_relay.responses["tar"] = "\x1b[1mtar\x1b[0m -xf"
        await client.search("tar")
        page = client.render_page()
        assert "<title>tar</title>" in page
        assert "tar -xf" in page
        assert "\x1b" not in page

        fake_relay.responses["zzz"] = ""
        await client.search("zzz")
        assert "No results found" in client.render_page()
