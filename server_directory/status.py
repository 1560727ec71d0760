"""Live status lookups for listed servers.

Status is always fetched through the directory's own relay endpoint, which
forwards to the upstream status provider.  Nothing here ever raises: every
failure is turned into an offline :class:`StatusResult`.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp


logger = logging.getLogger(__name__)

DEFAULT_PORT = 25565


def canonical_address(host, port=DEFAULT_PORT):
	"""Address string sent to the relay.  The default port is left out."""
	if port and port != DEFAULT_PORT:
		return f"{host}:{port}"
	return host


@dataclass(frozen=True)
class PlayerCounts:
	online: int
	max: int


@dataclass(frozen=True)
class StatusResult:
	online: bool
	players: Optional[PlayerCounts] = None
	version: Optional[str] = None
	motd: Optional[str] = None
	motd_html: Optional[str] = None
	favicon_url: Optional[str] = None
	ip: Optional[str] = None
	port: Optional[int] = None
	error: Optional[str] = None

	def as_json(self):
		obj = {"online": self.online}

		# Optional fields
		if self.players is not None:
			obj["players"] = {"online": self.players.online, "max": self.players.max}
		for field in ("version", "motd", "motd_html", "favicon_url", "ip", "port", "error"):
			value = getattr(self, field)
			if value is not None:
				obj[field] = value

		return obj


class RelayClient:
	"""Talks to the relay endpoints of a running directory."""

	def __init__(self, base_url, session=None):
		self.base_url = base_url.rstrip("/")
		self.session = session
		self.owns_session = session is None

	async def __aenter__(self):
		if self.session is None:
			self.session = aiohttp.ClientSession()
		return self

	async def __aexit__(self, *exc_info):
		await self.close()

	async def close(self):
		if self.owns_session and self.session is not None:
			await self.session.close()
			self.session = None

	async def _post(self, path, payload):
		async with self.session.post(self.base_url + path, json=payload) as resp:
			# Error responses carry a JSON body as well
			return await resp.json(content_type=None)

	async def query_server(self, address):
		return await self._post("/api/query-mc-server", {"server": address})


async def fetch_status(address, relay):
	"""Queries the status of the server at `address` through `relay`.

	Returns a StatusResult.  A relay that could not be reached or that
	reported a failure gives ``online=False`` with ``error`` set, while a
	server the provider found unreachable gives ``online=False`` alone.
	"""
	try:
		resp = await relay.query_server(address)
	except (aiohttp.ClientError, ValueError) as e:
		logger.warning("Status relay request for %s failed: %s", address, e)
		return StatusResult(online=False, error=str(e) or type(e).__name__)
	except Exception as e:
		logger.warning("Unexpected exception during status query for %s: %r", address, e)
		return StatusResult(online=False, error=str(e) or type(e).__name__)

	if not isinstance(resp, dict):
		return StatusResult(online=False, error="Malformed relay response.")

	if not resp.get("success"):
		return StatusResult(online=False, error=resp.get("error") or "Query failed.")

	data = resp.get("data")
	if not isinstance(data, dict):
		return StatusResult(online=False, error="Malformed relay response.")

	if not data.get("online"):
		return StatusResult(online=False)

	return StatusResult(
		online=True,
		players=PlayerCounts(data.get("players", 0), data.get("max_players", 0)),
		version=data.get("version"),
		motd=data.get("motd_clean"),
		motd_html=data.get("motd_html"),
		favicon_url=data.get("favicon_url"),
		ip=data.get("ip"),
		port=data.get("port"),
	)
