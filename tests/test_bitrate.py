import pytest

from jellyfin_nzbget_throttler.bitrate import estimate_bitrate
from jellyfin_nzbget_throttler.models import (MediaKind, MediaStream,
                                              PlaybackSession, StreamKind)

from conftest import make_session


def test_play_state_bitrate_takes_priority():
	session = make_session(
		bit_rate=8_000_000,
		streams=(MediaStream(StreamKind.video, width=3840, height=2160),)
	)
	assert estimate_bitrate(session) == 1000


def test_play_state_bitrate_rounds_up():
	assert estimate_bitrate(make_session(bit_rate=8001)) == 2


def test_audio_without_streams_uses_default():
	assert estimate_bitrate(make_session(kind=MediaKind.audio)) == 320


@pytest.mark.parametrize('kind,expected', [
	(MediaKind.movie, 8000),
	(MediaKind.episode, 8000),
	(MediaKind.other, 10000),
])
def test_media_kind_defaults(kind, expected):
	assert estimate_bitrate(make_session(kind=kind)) == expected


def test_session_without_now_playing_uses_fallback():
	session = PlaybackSession(user_name='bob', device_name='Phone', client='Android')
	assert estimate_bitrate(session) == 10000


@pytest.mark.parametrize('height,expected', [
	(2160, 3125),
	(1080, 1000),
	(800, 625),
	(720, 625),
	(480, 313),
])
def test_video_resolution_tiers(height, expected):
	stream = MediaStream(StreamKind.video, width=height * 16 // 9, height=height)
	assert estimate_bitrate(make_session(streams=(stream,))) == expected


def test_video_without_resolution_counts_as_1080p():
	stream = MediaStream(StreamKind.video, height=2160)
	assert estimate_bitrate(make_session(streams=(stream,))) == 1000


def test_streams_are_summed():
	streams = (
		MediaStream(StreamKind.video, bit_rate=20_000_000, width=3840, height=2160),
		MediaStream(StreamKind.audio),
		MediaStream(StreamKind.audio, bit_rate=640_000),
		MediaStream(StreamKind.other, codec='subrip'),
	)
	# 20_000_000 + 192_000 + 640_000 = 20_832_000 bits/sec
	assert estimate_bitrate(make_session(streams=streams)) == 2604


def test_zero_bitrates_are_treated_as_missing():
	session = make_session(
		bit_rate=0,
		streams=(MediaStream(StreamKind.video, bit_rate=0, width=1280, height=720),)
	)
	assert estimate_bitrate(session) == 625


def test_negative_play_state_bitrate_is_treated_as_missing():
	assert estimate_bitrate(make_session(bit_rate=-80_000_000)) == 8000


def test_negative_stream_values_are_treated_as_missing():
	streams = (
		MediaStream(StreamKind.video, bit_rate=-5_000_000, width=-1920, height=-1080),
		MediaStream(StreamKind.audio, bit_rate=-192_000),
	)
	# Unknown resolution (8_000_000) + default audio (192_000)
	assert estimate_bitrate(make_session(streams=streams)) == 1024


def test_estimate_from_parsed_session_is_never_negative():
	session = PlaybackSession.from_json({
		'UserName': 'alice',
		'DeviceName': 'TV',
		'Client': 'Jellyfin Web',
		'NowPlayingItem': {'Name': 'Big Buck Bunny', 'Type': 'Movie'},
		'PlayState': {'BitRate': -80_000_000}
	})
	assert estimate_bitrate(session) == 8000
