"""
Decide how much bandwidth NZBGet is allowed to use while media is being
streamed from Jellyfin, and apply it when it changes.
"""

import logging
from math import ceil
from typing import List, Sequence

from .config import Config
from .jellyfin import JellyfinClient, describe_streams
from .models import StreamEstimate
from .nzbget import NZBGetClient, format_speed


def calculate_speed_limit(
	streams: Sequence[StreamEstimate],
	max_connection_speed: int,
	buffer_percentage: int
) -> int:
	"""Calculate the download speed limit based on the active streams.

	Args:
		streams (Sequence[StreamEstimate]): The active streams.
		max_connection_speed (int): The speed of the connection in KB/s.
		buffer_percentage (int): The percentage to add on top of the
			bandwidth of the streams.

	Returns:
		int: The speed limit in KB/s, between 0 and max_connection_speed.
	"""
	if not streams:
		return max_connection_speed

	total_stream_bitrate = sum(s.estimated_bitrate for s in streams)
	total_with_buffer = ceil(total_stream_bitrate * (100 + buffer_percentage) / 100)

	return min(max_connection_speed, max(0, max_connection_speed - total_with_buffer))


class Throttler:
	def __init__(
		self,
		config: Config,
		jellyfin_client: JellyfinClient,
		nzbget_client: NZBGetClient
	):
		self.config = config
		self.jellyfin_client = jellyfin_client
		self.nzbget_client = nzbget_client
		# The limit that is believed to be in effect in NZBGet
		self.current_speed_limit = 0
		return

	async def apply_speed_limit(self, new_speed_limit: int, streams: List[StreamEstimate]) -> bool:
		"""Set the speed limit in NZBGet if it differs from the current one.

		Args:
			new_speed_limit (int): The speed limit in KB/s.
			streams (List[StreamEstimate]): The streams the limit is based on.

		Returns:
			bool: Whether a new limit was set.
		"""
		if new_speed_limit == self.current_speed_limit:
			return False

		if not await self.nzbget_client.set_speed_limit(new_speed_limit):
			# Keep the old value so that it's tried again next check
			logging.warning(f'Failed to set NZBGet speed to {format_speed(new_speed_limit)}, keeping {format_speed(self.current_speed_limit)}')
			return False

		self.current_speed_limit = new_speed_limit

		if streams:
			logging.info('=' * 50)
			logging.info(f'{len(streams)} Active streams detected:')
			logging.info(describe_streams(streams))
			logging.info(f'Reducing speed by {self.config.max_connection_speed - new_speed_limit} KB/s')
			logging.info(f'Setting NZBGet speed to {format_speed(new_speed_limit)}')
		else:
			logging.info(f'No active streams, setting NZBGet speed to {format_speed(new_speed_limit)}')

		return True

	async def check_and_throttle(self) -> None:
		"""Check for active streams and throttle NZBGet accordingly"""
		streams = await self.jellyfin_client.get_active_stream_info()

		new_speed_limit = calculate_speed_limit(
			streams,
			self.config.max_connection_speed,
			self.config.buffer_percentage
		)
		logging.debug(f'{len(streams)} streams, speed limit {new_speed_limit} KB/s, current {self.current_speed_limit} KB/s')

		await self.apply_speed_limit(new_speed_limit, streams)
		return
