"""Per-server status polling.

Every displayed server gets its own StatusPoller.  Attaching a poller
schedules a single status fetch after a random delay, so that a page of
servers does not hit the status provider all at once.  Results that arrive
after the poller moved on to another server, or was detached, are dropped.
"""
import asyncio
import enum
import logging
import random

from .status import canonical_address


logger = logging.getLogger(__name__)


class TaskHandle:
	"""Handle for a fetch scheduled with spawn().

	Cancelling before the delay elapsed prevents the fetch from starting.
	A fetch that already started keeps running; its owner has to ignore
	the result.
	"""

	def __init__(self):
		self.timer = None
		self.task = None
		self.cancelled = False

		# Set once the fetch has started or can no longer start
		self.settled = asyncio.Event()

	@property
	def fired(self):
		return self.task is not None

	def cancel(self):
		self.cancelled = True
		if self.timer is not None:
			self.timer.cancel()
			self.timer = None
		self.settled.set()

	async def wait(self):
		"""Waits for the fetch to finish, or for the handle to be cancelled."""
		await self.settled.wait()
		if self.task is not None:
			await asyncio.shield(self.task)


def spawn(delay, fetch, loop=None):
	"""Runs the coroutine function `fetch` after `delay` seconds.

	With no delay the fetch is started right away.
	"""
	if loop is None:
		loop = asyncio.get_running_loop()
	handle = TaskHandle()

	def fire():
		handle.timer = None
		if handle.cancelled:
			return
		handle.task = loop.create_task(fetch())
		handle.settled.set()

	if delay > 0:
		handle.timer = loop.call_later(delay, fire)
	else:
		fire()
	return handle


class PollState(enum.Enum):
	IDLE = "idle"
	PENDING = "pending"
	ONLINE = "online"
	OFFLINE = "offline"
	ERROR = "error"


class StatusPoller:
	"""Tracks the live status of one displayed server.

	`fetch_status` is a coroutine function taking a canonical address and
	returning a StatusResult.  It must not raise.
	"""

	def __init__(self, fetch_status, jitter=1.0, rng=random.random):
		self.fetch_status = fetch_status
		self.jitter = jitter
		self.rng = rng

		self.key = None
		self.attached = False
		self.state = PollState.IDLE
		self.result = None

		# Bumped whenever a scheduled fetch is superseded
		self.generation = 0
		self.handle = None

		# Set once the latest scheduled fetch has been committed
		self.resolved = None

	@property
	def checking(self):
		return self.state is PollState.PENDING

	def attach(self, entity_id, host, port):
		"""Starts polling a server, or switches to a new address.

		Re-attaching with an unchanged key does nothing.
		"""
		key = (entity_id, host, port)
		if self.attached and key == self.key:
			return self.handle

		if key != self.key:
			self.result = None
		self.key = key
		self.attached = True
		return self._schedule(self.rng() * self.jitter)

	def detach(self):
		"""Stops polling.  Any pending or in-flight fetch is discarded."""
		self.attached = False
		self.generation += 1
		if self.handle is not None:
			self.handle.cancel()
			self.handle = None
		self._resolve()
		self.state = PollState.IDLE
		self.result = None

	def refresh(self):
		"""Fetches again right away, replacing any scheduled fetch."""
		if not self.attached:
			raise RuntimeError("Cannot refresh a detached poller.")
		return self._schedule(0)

	async def wait(self):
		"""Waits until the latest scheduled fetch, if any, has resolved.

		Fetches scheduled while waiting are waited for as well.
		"""
		while self.resolved is not None and not self.resolved.is_set():
			await self.resolved.wait()

	def _schedule(self, delay):
		if self.handle is not None:
			self.handle.cancel()

		self.generation += 1
		generation = self.generation
		entity_id, host, port = self.key
		address = canonical_address(host, port)

		async def fetch():
			result = await self.fetch_status(address)
			self._commit(generation, result)

		# Wake up waiters on the superseded fetch so they move on to this one
		self._resolve()
		self.resolved = asyncio.Event()

		self.state = PollState.PENDING
		self.handle = spawn(delay, fetch)
		return self.handle

	def _commit(self, generation, result):
		if not self.attached or generation != self.generation:
			logger.debug("Dropping stale status result for %r.", self.key)
			return

		self.result = result
		if result.online:
			self.state = PollState.ONLINE
		elif result.error is not None:
			self.state = PollState.ERROR
		else:
			self.state = PollState.OFFLINE
		self._resolve()

	def _resolve(self):
		if self.resolved is not None:
			self.resolved.set()
