"""
Settings of the throttler. Every value can be given as an environmental
variable or in a .env file in the current folder; the defaults connect to a
Jellyfin and NZBGet instance running on the same machine with their stock
settings.
"""

from dataclasses import dataclass
from os import getenv
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

#===== DEFAULT VALUES =====
jellyfin_url = 'http://localhost:8096'
jellyfin_api_key = ''

nzbget_url = 'http://localhost:6789'
nzbget_username = 'nzbget'
nzbget_password = 'tegbzn6789'

# Seconds between checks
check_interval = 30
# KB/s; 1Gbps = 125000 KB/s
max_connection_speed = 125000
# Extra bandwidth reserved on top of the estimated stream bitrates
buffer_percentage = 20
# Don't count paused streams as taking bandwidth
ignore_paused = False
# Seconds before a request to Jellyfin or NZBGet is given up on
request_timeout = 10
#==========================

TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Config:
	jellyfin_url: str = jellyfin_url
	jellyfin_api_key: str = jellyfin_api_key
	nzbget_url: str = nzbget_url
	nzbget_username: str = nzbget_username
	nzbget_password: str = nzbget_password
	check_interval: int = check_interval
	max_connection_speed: int = max_connection_speed
	buffer_percentage: int = buffer_percentage
	ignore_paused: bool = ignore_paused
	request_timeout: int = request_timeout

	def __post_init__(self):
		if not self.jellyfin_url:
			raise ValueError("The Jellyfin url can't be empty")
		if not self.nzbget_url:
			raise ValueError("The NZBGet url can't be empty")
		if self.check_interval < 1:
			raise ValueError('The check interval has to be at least 1 second')
		if self.max_connection_speed < 0:
			raise ValueError("The max connection speed can't be negative")
		if self.buffer_percentage < 0:
			raise ValueError("The buffer percentage can't be negative")
		if self.request_timeout <= 0:
			raise ValueError('The request timeout has to be greater than 0')

		# Allow urls to be given with a trailing slash
		object.__setattr__(self, 'jellyfin_url', self.jellyfin_url.rstrip('/'))
		object.__setattr__(self, 'nzbget_url', self.nzbget_url.rstrip('/'))
		return


def _int_env(name: str, default: int) -> int:
	value = getenv(name)
	if value is None or value == '':
		return default
	try:
		return int(value)
	except ValueError:
		raise ValueError(f'The environmental variable {name} has to be a whole number, not "{value}"')


def _bool_env(name: str, default: bool) -> bool:
	value = getenv(name)
	if value is None or value == '':
		return default
	return value.strip().lower() in TRUE_VALUES


def load_config(
	interval: Union[int, None] = None,
	max_speed: Union[int, None] = None,
	buffer: Union[int, None] = None,
	skip_paused: Union[bool, None] = None
) -> Config:
	"""Read the config from the environmental variables.

	Values in a .env file in the current folder are used for environmental
	variables that are not set.

	Arguments that are not None overrule the matching environmental variable.

	Raises:
		ValueError: A value is missing or invalid.

	Returns:
		Config: The config to run with.
	"""
	load_dotenv(Path.cwd() / '.env')

	if interval is None:
		interval = _int_env('check_interval', check_interval)
	if max_speed is None:
		max_speed = _int_env('max_connection_speed', max_connection_speed)
	if buffer is None:
		buffer = _int_env('buffer_percentage', buffer_percentage)
	if skip_paused is None:
		skip_paused = _bool_env('ignore_paused', ignore_paused)

	return Config(
		jellyfin_url=getenv('jellyfin_url', jellyfin_url),
		jellyfin_api_key=getenv('jellyfin_api_key', jellyfin_api_key),
		nzbget_url=getenv('nzbget_url', nzbget_url),
		nzbget_username=getenv('nzbget_username', nzbget_username),
		nzbget_password=getenv('nzbget_password', nzbget_password),
		check_interval=interval,
		max_connection_speed=max_speed,
		buffer_percentage=buffer,
		ignore_paused=skip_paused,
		request_timeout=_int_env('request_timeout', request_timeout)
	)
