import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer
import pytest

from server_directory.status import PlayerCounts, RelayClient, StatusResult, \
	canonical_address, fetch_status


class FakeRelay:
	def __init__(self, response=None, exc=None):
		self.response = response
		self.exc = exc
		self.calls = []

	async def query_server(self, address):
		self.calls.append(address)
		if self.exc is not None:
			raise self.exc
		return self.response


def test_canonical_address_omits_default_port():
	assert canonical_address("play.example.com", 25565) == "play.example.com"
	assert canonical_address("play.example.com") == "play.example.com"


def test_canonical_address_keeps_other_ports():
	assert canonical_address("play.example.com", 25566) == "play.example.com:25566"
	assert canonical_address("10.0.0.1", 19132) == "10.0.0.1:19132"


@pytest.mark.asyncio
async def test_online_server_is_mapped():
	relay = FakeRelay({
		"success": True,
		"data": {
			"online": True,
			"players": 3,
			"max_players": 10,
			"version": "1.20",
			"motd_clean": "Hi",
		},
	})

	result = await fetch_status(canonical_address("play.example.com", 25565), relay)

	assert relay.calls == ["play.example.com"]
	assert result == StatusResult(online=True, players=PlayerCounts(3, 10),
		version="1.20", motd="Hi")
	assert result.as_json() == {
		"online": True,
		"players": {"online": 3, "max": 10},
		"version": "1.20",
		"motd": "Hi",
	}


@pytest.mark.asyncio
async def test_motd_html_and_favicon_are_kept():
	relay = FakeRelay({
		"success": True,
		"data": {
			"online": True,
			"players": 1,
			"max_players": 2,
			"version": "Paper 1.21",
			"motd_clean": "Welcome",
			"motd_html": "<span style=\"color:#55FF55\">Welcome</span>",
			"favicon_url": "data:image/png;base64,AAAA",
		},
	})

	result = await fetch_status("mc.example.org:25570", relay)

	assert result.motd == "Welcome"
	assert result.motd_html.startswith("<span")
	assert result.favicon_url == "data:image/png;base64,AAAA"


@pytest.mark.asyncio
async def test_relay_failure_gives_offline_with_error():
	relay = FakeRelay({"success": False, "error": "timeout"})

	result = await fetch_status("play.example.com", relay)

	assert result == StatusResult(online=False, error="timeout")


@pytest.mark.asyncio
async def test_unreachable_server_gives_offline_without_error():
	relay = FakeRelay({"success": True, "data": {"online": False, "players": 0}})

	result = await fetch_status("play.example.com", relay)

	assert result == StatusResult(online=False)
	assert result.error is None


@pytest.mark.asyncio
async def test_transport_failure_does_not_raise():
	relay = FakeRelay(exc=aiohttp.ClientConnectionError("connection refused"))

	result = await fetch_status("play.example.com", relay)

	assert result.online is False
	assert result.error == "connection refused"


@pytest.mark.asyncio
async def test_malformed_response_does_not_raise():
	result = await fetch_status("play.example.com", FakeRelay(exc=ValueError("bad json")))
	assert result.online is False
	assert result.error == "bad json"

	result = await fetch_status("play.example.com", FakeRelay(["not", "an", "object"]))
	assert result.online is False
	assert result.error is not None

	result = await fetch_status("play.example.com", FakeRelay({"success": True}))
	assert result.online is False
	assert result.error is not None


@pytest.mark.asyncio
async def test_unexpected_exception_does_not_raise():
	result = await fetch_status("play.example.com", FakeRelay(exc=RuntimeError()))
	assert result == StatusResult(online=False, error="RuntimeError")


def relay_app(handler):
	app = web.Application()
	app.router.add_post("/api/query-mc-server", handler)
	return app


@pytest.mark.asyncio
async def test_relay_client_posts_address():
	received = []

	async def handler(request):
		received.append(await request.json())
		return web.json_response({"success": True, "data": {
			"online": True, "players": 2, "max_players": 8, "version": "1.21"}})

	async with TestServer(relay_app(handler)) as server:
		async with RelayClient(str(server.make_url("/"))) as relay:
			result = await fetch_status("play.example.com", relay)

	assert received == [{"server": "play.example.com"}]
	assert result.online is True
	assert result.players == PlayerCounts(2, 8)
	assert result.version == "1.21"


@pytest.mark.asyncio
async def test_relay_client_reads_error_body():
	async def handler(request):
		return web.json_response({"success": False, "error": "upstream down"}, status=500)

	async with TestServer(relay_app(handler)) as server:
		async with RelayClient(str(server.make_url("/"))) as relay:
			result = await fetch_status("play.example.com", relay)

	assert result == StatusResult(online=False, error="upstream down")


@pytest.mark.asyncio
async def test_relay_client_non_json_body():
	async def handler(request):
		return web.Response(text="<html>Bad Gateway</html>", status=502, content_type="text/html")

	async with TestServer(relay_app(handler)) as server:
		async with RelayClient(str(server.make_url("/"))) as relay:
			result = await fetch_status("play.example.com", relay)

	assert result.online is False
	assert result.error


@pytest.mark.asyncio
async def test_relay_client_keeps_borrowed_session_open():
	async def handler(request):
		return web.json_response({"success": True, "data": {"online": False}})

	async with TestServer(relay_app(handler)) as server:
		async with aiohttp.ClientSession() as session:
			async with RelayClient(str(server.make_url("/")), session=session) as relay:
				result = await fetch_status("play.example.com", relay)
			assert not session.closed

	assert result == StatusResult(online=False)
