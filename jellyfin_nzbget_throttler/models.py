"""
Representation of the playback sessions that Jellyfin reports
and the bitrate estimates that are derived from them.
"""

from dataclasses import dataclass, field
from enum import Enum
from math import isfinite
from typing import Any, Mapping, Tuple, Union


class MediaKind(Enum):
	movie = 'Movie'
	episode = 'Episode'
	audio = 'Audio'
	other = 'Other'

	@classmethod
	def from_jellyfin(cls, value: Union[str, None]) -> 'MediaKind':
		for kind in cls:
			if kind.value == value:
				return kind
		return cls.other


class StreamKind(Enum):
	video = 'Video'
	audio = 'Audio'
	# Subtitle, EmbeddedImage, Data, etc.
	other = 'Other'

	@classmethod
	def from_jellyfin(cls, value: Union[str, None]) -> 'StreamKind':
		for kind in cls:
			if kind.value == value:
				return kind
		return cls.other


def _number(value: Any) -> Union[int, None]:
	"""Numeric fields of the Jellyfin api, None when missing or not a number"""
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return None
	if not isfinite(value):
		return None
	return int(value)


# Media kinds that take bandwidth while being played
PLAYABLE_KINDS = (MediaKind.movie, MediaKind.episode, MediaKind.audio)


@dataclass(frozen=True)
class MediaStream:
	kind: StreamKind
	bit_rate: Union[int, None] = None
	width: Union[int, None] = None
	height: Union[int, None] = None
	codec: Union[str, None] = None

	@classmethod
	def from_json(cls, data: Mapping[str, Any]) -> 'MediaStream':
		return cls(
			kind=StreamKind.from_jellyfin(data.get('Type')),
			bit_rate=_number(data.get('BitRate')),
			width=_number(data.get('Width')),
			height=_number(data.get('Height')),
			codec=data.get('Codec')
		)


@dataclass(frozen=True)
class MediaDescriptor:
	name: str
	kind: MediaKind
	streams: Tuple[MediaStream, ...] = field(default_factory=tuple)

	@classmethod
	def from_json(cls, data: Mapping[str, Any]) -> 'MediaDescriptor':
		return cls(
			name=data.get('Name', ''),
			kind=MediaKind.from_jellyfin(data.get('Type')),
			streams=tuple(
				MediaStream.from_json(s)
				for s in (data.get('MediaStreams') or [])
			)
		)


@dataclass(frozen=True)
class PlayState:
	is_paused: bool = False
	is_playing: bool = False
	play_method: Union[str, None] = None
	# Bits per second, only present for some (remote) playback
	bit_rate: Union[int, None] = None

	@classmethod
	def from_json(cls, data: Mapping[str, Any]) -> 'PlayState':
		return cls(
			is_paused=bool(data.get('IsPaused', False)),
			is_playing=bool(data.get('IsPlaying', False)),
			play_method=data.get('PlayMethod'),
			bit_rate=_number(data.get('BitRate'))
		)


@dataclass(frozen=True)
class PlaybackSession:
	user_name: str
	device_name: str
	client: str
	device_id: str = ''
	now_playing: Union[MediaDescriptor, None] = None
	play_state: PlayState = field(default_factory=PlayState)

	@classmethod
	def from_json(cls, data: Mapping[str, Any]) -> 'PlaybackSession':
		"""Build a session from one entry of Jellyfin's /Sessions response.

		Raises:
			TypeError: The entry (or one of its children) is not a mapping.
		"""
		if not isinstance(data, Mapping):
			raise TypeError(f'Expected a session object, got {type(data).__name__}')

		now_playing = data.get('NowPlayingItem')
		return cls(
			user_name=data.get('UserName', ''),
			device_name=data.get('DeviceName', ''),
			client=data.get('Client', ''),
			device_id=data.get('DeviceId', ''),
			now_playing=(
				MediaDescriptor.from_json(now_playing)
				if now_playing is not None
				else None
			),
			play_state=PlayState.from_json(data.get('PlayState') or {})
		)

	@property
	def is_playable(self) -> bool:
		return (
			self.now_playing is not None
			and self.now_playing.kind in PLAYABLE_KINDS
		)


@dataclass(frozen=True)
class StreamEstimate:
	session: PlaybackSession
	# KB/s
	estimated_bitrate: int

	def describe(self) -> str:
		media_name = self.session.now_playing.name if self.session.now_playing else ''
		return (f'- {self.session.user_name} is playing {media_name} '
			f'on {self.session.device_name} '
			f'(estimated {self.estimated_bitrate} KB/s)')
