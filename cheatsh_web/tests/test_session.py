import httpx
import pytest

from cheatsh.lookup.errors import NotFound, SearchError, TransportError
from cheatsh.lookup.history import History
from cheatsh.lookup.relay_client import RelayClient
from cheatsh.lookup.session import SearchSession


@pytest.fixture
def session(fake_relay, store):
    return SearchSession(fake_relay, History(store))


class TestSubmit:
    @pytest.mark.asyncio
    async def test_blank_query_is_ignored(self, session, fake_relay):
        assert await session.submit("   ") is None
        assert await session.submit("") is None
        assert fake_relay.calls == []

    @pytest.mark.asyncio
    async def test_query_is_trimmed(self, session, fake_relay):
        fake_relay.responses["tar"] = "tar -xf file.tar"
        result = await session.submit("  tar \n")
        assert fake_relay.calls == ["tar"]
        assert result.query == "tar"
        assert result.text == "tar -xf file.tar"

    @pytest.mark.asyncio
    async def test_success_records_history(self, session):
        session.relay.responses.update({"a": "A", "b": "B"})
        for q in ["a", "b", "a"]:
            await session.submit(q)
        assert session.history.entries == ("a", "b")

    @pytest.mark.asyncio
    async def test_empty_body_is_not_found(self, session):
        session.relay.responses["nothing"] = "  \n"
        with pytest.raises(NotFound) as exc_info:
            await session.submit("nothing")
        assert exc_info.value.message == "No results found"
        assert exc_info.value.query == "nothing"
        assert session.history.entries == ()

    @pytest.mark.asyncio
    async def test_transport_error_carries_reason_and_token(self, session):
        session.relay.responses["tar"] = TransportError("HTTP 503")
        with pytest.raises(TransportError) as exc_info:
            await session.submit("tar")
        assert exc_info.value.message == "HTTP 503"
        assert exc_info.value.token == 1
        assert isinstance(exc_info.value, SearchError)
        assert session.history.entries == ()

    @pytest.mark.asyncio
    async def test_tokens_increase_and_latest_is_current(self, session):
        session.relay.responses.update({"a": "A", "b": "B"})
        first = await session.submit("a")
        second = await session.submit("b")
        assert second.token > first.token
        assert session.is_current(second.token)
        assert not session.is_current(first.token)


class TestRelayClient:
    @pytest.mark.asyncio
    async def test_fetch_sends_query_parameter(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="tar -cf")

        relay = RelayClient(base_url="http://relay.test", transport=httpx.MockTransport(handler))
        assert await relay.fetch(":list") == "tar -cf"
        assert seen[0].url.path == "/api/cheat"
        assert seen[0].url.params["q"] == ":list"

    @pytest.mark.asyncio
    async def test_non_success_status_is_transport_error(self):
        relay = RelayClient(
            base_url="http://relay.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(404, text="Unknown topic")),
        )
        with pytest.raises(TransportError, match="HTTP 404"):
            await relay.fetch("nosuchthing")

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        relay = RelayClient(base_url="http://relay.test", transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="connection refused"):
            await relay.fetch("tar")
