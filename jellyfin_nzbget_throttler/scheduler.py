"""
Run a coroutine at a fixed interval, without ever running it twice at the
same time.
"""

import logging
from asyncio import Event, Task, TimeoutError as AsyncTimeoutError, get_running_loop, wait_for
from enum import Enum
from typing import Awaitable, Callable, Union


class TickerState(Enum):
	idle = 'idle'
	running = 'running'


class Ticker:
	def __init__(self, callback: Callable[[], Awaitable[None]], interval: float):
		"""Calls `callback` once when started and then every `interval` seconds.

		If a call is still running when the next one is due, the due call is
		skipped instead of queued.

		Args:
			callback (Callable[[], Awaitable[None]]): The coroutine function to run.
			interval (float): Seconds between the start of two calls.
		"""
		if interval <= 0:
			raise ValueError('The interval has to be greater than 0')

		self.callback = callback
		self.interval = interval
		self.state = TickerState.idle
		self.busy = False
		self.ticks = 0
		self.skipped = 0
		self._stop_event: Union[Event, None] = None
		self._task: Union[Task, None] = None
		return

	async def fire(self) -> bool:
		"""Run the callback once, unless it's already running.

		Errors raised by the callback are logged and don't reach the caller.

		Returns:
			bool: Whether the callback was run.
		"""
		if self.busy:
			self.skipped += 1
			logging.warning('Previous check is still running, skipping this one')
			return False

		self.busy = True
		try:
			await self.callback()
		except Exception:
			logging.exception('Error during check and throttle: ')
		finally:
			self.busy = False
			self.ticks += 1
		return True

	async def start(self) -> None:
		"""Run the callback right away and then at every interval.

		Raises:
			RuntimeError: The ticker is already running.
		"""
		if self.state == TickerState.running:
			raise RuntimeError('Ticker is already running')

		self.state = TickerState.running
		self._stop_event = Event()
		await self.fire()
		self._task = get_running_loop().create_task(self._run(self._stop_event))
		return

	async def stop(self) -> None:
		"""Stop running the callback. Waits for a running callback to finish."""
		if self.state == TickerState.idle:
			return

		self.state = TickerState.idle
		if self._stop_event is not None:
			self._stop_event.set()
		if self._task is not None:
			await self._task
		self._task = None
		self._stop_event = None
		return

	async def _run(self, stop_event: Event) -> None:
		loop = get_running_loop()
		next_time = loop.time() + self.interval

		while not stop_event.is_set():
			try:
				await wait_for(stop_event.wait(), max(0, next_time - loop.time()))
				break
			except AsyncTimeoutError:
				pass

			await self.fire()

			next_time += self.interval
			now = loop.time()
			if now > next_time:
				# Check took longer than the interval
				missed = int((now - next_time) // self.interval) + 1
				self.skipped += missed
				next_time += missed * self.interval
				logging.warning(f'Check took longer than the interval, skipped {missed} check(s)')
		return
