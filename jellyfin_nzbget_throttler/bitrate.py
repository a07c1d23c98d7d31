"""
Estimate how much bandwidth a playback session needs, in KB/s.

The information Jellyfin gives about a session differs per client and play
method, so the estimate falls back from the most to the least precise source:
	1. The bitrate of the play state (bits/sec)
	2. The sum of the bitrates of the media streams, guessed from the
	   resolution of a video stream when it has no bitrate
	3. A fixed value based on the type of media
Every guess errs on the high side.
"""

from math import ceil
from typing import Union

from .models import MediaKind, MediaStream, PlaybackSession, StreamKind

# Bits per second, highest resolution first
VIDEO_RESOLUTION_BITRATES = (
	(2160, 25_000_000), # 4K
	(1080, 8_000_000),
	(720, 5_000_000),
	(0, 2_500_000) # SD
)
UNKNOWN_RESOLUTION_BITRATE = 8_000_000
AUDIO_STREAM_BITRATE = 192_000

# KB/s
MEDIA_KIND_BITRATES = {
	MediaKind.movie: 8000,
	MediaKind.episode: 8000,
	MediaKind.audio: 320
}
FALLBACK_BITRATE = 10000


def is_known(value: Union[int, None]) -> bool:
	return value is not None and value > 0


def bits_to_kilobytes(bit_rate: int) -> int:
	return ceil(bit_rate / 8000)


def video_bitrate(stream: MediaStream) -> int:
	if not (is_known(stream.width) and is_known(stream.height)):
		return UNKNOWN_RESOLUTION_BITRATE

	for min_height, bit_rate in VIDEO_RESOLUTION_BITRATES:
		if stream.height >= min_height:
			return bit_rate
	return VIDEO_RESOLUTION_BITRATES[-1][1]


def stream_bitrate(stream: MediaStream) -> int:
	"""Bits per second that a single media stream is assumed to take"""
	if is_known(stream.bit_rate):
		return stream.bit_rate
	if stream.kind == StreamKind.video:
		return video_bitrate(stream)
	if stream.kind == StreamKind.audio:
		return AUDIO_STREAM_BITRATE
	return 0


def estimate_bitrate(session: PlaybackSession) -> int:
	"""Estimate the bandwidth that a session takes.

	Args:
		session (PlaybackSession): The session to estimate.

	Returns:
		int: The estimated bandwidth in KB/s.
	"""
	if is_known(session.play_state.bit_rate):
		return bits_to_kilobytes(session.play_state.bit_rate)

	now_playing = session.now_playing
	if now_playing is not None and now_playing.streams:
		return bits_to_kilobytes(
			sum(stream_bitrate(s) for s in now_playing.streams)
		)

	if now_playing is None:
		return FALLBACK_BITRATE
	return MEDIA_KIND_BITRATES.get(now_playing.kind, FALLBACK_BITRATE)
