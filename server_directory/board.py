import asyncio
import functools
import random

from .display import display_players, display_version, status_badge
from .poller import StatusPoller
from .status import fetch_status


class StatusBoard:
	"""A set of displayed servers, each with its own status poller.

	Servers are any objects with the listing fields `id`, `name`,
	`ip_address`, `port`, `version`, `online_players` and `max_players`.
	"""

	def __init__(self, fetch, jitter=1.0, rng=random.random):
		self.fetch = fetch
		self.jitter = jitter
		self.rng = rng
		self.servers = {}
		self.pollers = {}

	@classmethod
	def for_relay(cls, relay, **kwargs):
		return cls(functools.partial(fetch_status, relay=relay), **kwargs)

	def mount(self, server):
		"""Shows a server, or updates one already shown."""
		poller = self.pollers.get(server.id)
		if poller is None:
			poller = self.pollers[server.id] = StatusPoller(self.fetch, self.jitter, self.rng)
		self.servers[server.id] = server
		poller.attach(server.id, server.ip_address, server.port)

	def unmount(self, server_id):
		poller = self.pollers.pop(server_id, None)
		self.servers.pop(server_id, None)
		if poller is not None:
			poller.detach()

	def unmount_all(self):
		for server_id in list(self.pollers):
			self.unmount(server_id)

	def refresh(self, server_id):
		self.pollers[server_id].refresh()

	async def settle(self):
		"""Waits for every poll currently scheduled or in flight."""
		await asyncio.gather(*(p.wait() for p in self.pollers.values()))

	def row(self, server_id):
		server = self.servers[server_id]
		poller = self.pollers[server_id]
		live = poller.result
		return {
			"id": server.id,
			"name": server.name,
			"badge": status_badge(live, poller.checking),
			"players": display_players(server, live),
			"version": display_version(server, live),
		}

	def rows(self):
		return [self.row(server_id) for server_id in self.servers]
