"""
Control the download speed of NZBGet through its JSON-RPC api
"""

import logging
from asyncio import TimeoutError as AsyncTimeoutError
from itertools import count
from typing import Any, Dict, List

from aiohttp import BasicAuth, ClientError, ClientSession, ClientTimeout

from .config import Config

_request_ids = count(1)


class NZBGetError(Exception):
	"""NZBGet could not be reached or returned an error"""


def format_speed(speed: int) -> str:
	return 'unlimited' if speed == 0 else f'{speed} KB/s'


class NZBGetClient:
	def __init__(self, config: Config):
		self.base_url = config.nzbget_url
		self.auth = BasicAuth(config.nzbget_username, config.nzbget_password)
		self.timeout = ClientTimeout(total=config.request_timeout)
		return

	async def _api_call(self, method: str, params: List[Any] = []) -> Any:
		"""Call a method of the NZBGet api.

		Args:
			method (str): The name of the RPC method.
			params (List[Any], optional): The parameters of the method.
				Defaults to [].

		Raises:
			NZBGetError: NZBGet could not be reached or returned an error.

		Returns:
			Any: The 'result' value of the response.
		"""
		payload = {
			'method': method,
			'params': params,
			'id': next(_request_ids)
		}
		try:
			async with ClientSession(timeout=self.timeout, auth=self.auth) as session:
				async with session.post(f'{self.base_url}/jsonrpc', json=payload) as response:
					response.raise_for_status()
					data = await response.json(content_type=None)

		except (ClientError, AsyncTimeoutError, ValueError) as e:
			raise NZBGetError(f'Error calling NZBGet api method {method}: {e!r}') from e

		if not isinstance(data, dict):
			raise NZBGetError(f'Unexpected response from NZBGet api method {method}: {data!r}')
		if data.get('error'):
			raise NZBGetError(f'NZBGet api error for method {method}: {data["error"]}')

		return data.get('result')

	async def get_status(self) -> Dict[str, Any]:
		"""Get the status of NZBGet.

		Raises:
			NZBGetError: NZBGet could not be reached or returned an error.

		Returns:
			Dict[str, Any]: The status info.
		"""
		status = await self._api_call('status')
		if not isinstance(status, dict):
			raise NZBGetError(f'Unexpected status response from NZBGet: {status!r}')
		return status

	async def get_download_rate(self) -> int:
		"""Get the current download speed in KB/s. 0 when it can't be read."""
		try:
			status = await self.get_status()
			return int(status.get('DownloadRate') or 0) // 1024

		except (NZBGetError, ValueError, TypeError) as e:
			logging.error(f'Error getting download rate: {e}')
			return 0

	async def set_speed_limit(self, speed: int) -> bool:
		"""Set the download speed limit.

		Args:
			speed (int): The limit in KB/s. 0 means unlimited.

		Returns:
			bool: Whether NZBGet accepted the new limit.
		"""
		try:
			result = await self._api_call('rate', [speed])
			if result is False:
				raise NZBGetError('NZBGet refused the new speed limit')

		except NZBGetError as e:
			logging.error(f'Error setting speed limit: {e}')
			return False

		logging.info(f'NZBGet download speed set to {format_speed(speed)}')
		return True
