"""
Read the playback sessions of a Jellyfin server
"""

import logging
from asyncio import TimeoutError as AsyncTimeoutError
from typing import List

from aiohttp import ClientError, ClientSession, ClientTimeout

from .bitrate import estimate_bitrate
from .config import Config
from .models import PlaybackSession, StreamEstimate


class JellyfinClient:
	def __init__(self, config: Config):
		self.base_url = config.jellyfin_url
		self.api_key = config.jellyfin_api_key
		self.ignore_paused = config.ignore_paused
		self.timeout = ClientTimeout(total=config.request_timeout)
		return

	async def get_active_sessions(self) -> List[PlaybackSession]:
		"""Get the sessions that Jellyfin currently knows of.

		Returns:
			List[PlaybackSession]: The sessions. Empty when Jellyfin could not
			be reached or gave a response that could not be understood.
		"""
		try:
			async with ClientSession(timeout=self.timeout) as session:
				async with session.get(
					f'{self.base_url}/Sessions',
					headers={'X-MediaBrowser-Token': self.api_key}
				) as response:
					response.raise_for_status()
					data = await response.json(content_type=None)

			if not isinstance(data, list):
				raise TypeError(f'Expected a list of sessions, got {type(data).__name__}')
			return [PlaybackSession.from_json(s) for s in data]

		except (ClientError, AsyncTimeoutError, ValueError, TypeError, AttributeError) as e:
			logging.error(f'Error fetching Jellyfin sessions: {e!r}')
			return []

	async def get_active_stream_info(self) -> List[StreamEstimate]:
		"""Get the sessions that are streaming media, with their estimated bitrate"""
		sessions = await self.get_active_sessions()

		active_sessions = [
			s for s in sessions
			if s.is_playable
			and not (self.ignore_paused and s.play_state.is_paused)
		]
		for s in active_sessions:
			logging.debug(f'Active session: {s}')

		return [
			StreamEstimate(session=s, estimated_bitrate=estimate_bitrate(s))
			for s in active_sessions
		]

	async def has_active_streams(self) -> bool:
		return bool(await self.get_active_stream_info())


def describe_streams(streams: List[StreamEstimate]) -> str:
	if not streams:
		return 'No active streams'
	return '\n'.join(s.describe() for s in streams)
