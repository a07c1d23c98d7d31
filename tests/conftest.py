from typing import List

import pytest

from jellyfin_nzbget_throttler.config import Config
from jellyfin_nzbget_throttler.models import (MediaDescriptor, MediaKind,
                                              PlaybackSession, PlayState,
                                              StreamEstimate)


class FakeJellyfinClient:
	def __init__(self, streams: List[StreamEstimate] = []):
		self.streams = list(streams)
		self.calls = 0

	async def get_active_stream_info(self) -> List[StreamEstimate]:
		self.calls += 1
		return list(self.streams)


class FakeNZBGetClient:
	def __init__(self, succeed: bool = True):
		self.succeed = succeed
		self.limits: List[int] = []

	async def set_speed_limit(self, speed: int) -> bool:
		self.limits.append(speed)
		return self.succeed


def make_session(
	user_name: str = 'alice',
	kind: MediaKind = MediaKind.movie,
	name: str = 'Big Buck Bunny',
	streams: tuple = (),
	bit_rate: int = None,
	is_paused: bool = False
) -> PlaybackSession:
	return PlaybackSession(
		user_name=user_name,
		device_name='Living room TV',
		client='Jellyfin Web',
		now_playing=MediaDescriptor(name=name, kind=kind, streams=streams),
		play_state=PlayState(is_paused=is_paused, is_playing=not is_paused, bit_rate=bit_rate)
	)


def make_estimate(estimated_bitrate: int, user_name: str = 'alice') -> StreamEstimate:
	return StreamEstimate(session=make_session(user_name=user_name), estimated_bitrate=estimated_bitrate)


@pytest.fixture
def config() -> Config:
	return Config(max_connection_speed=125000, buffer_percentage=20)
