#!/usr/bin/env python3
#-*- coding: utf-8 -*-

"""
The use case of this script is the following:
	Limit the download speed of NZBGet while media is being streamed from Jellyfin,
	so that streams don't buffer. When nothing is streamed, NZBGet gets the full connection.
Requirements (python3 -m pip install [requirement]):
	aiohttp
	python-dotenv
Setup:
	1. Set the environmental variables (see config.py for the names and defaults),
		put them in a .env file in the folder the script is run from,
		or fill the default values in config.py.
	2. Run the script in a terminal/shell with the "-h" flag to learn more about the parameters.
		python3 -m jellyfin_nzbget_throttler -h
	Once this script is run, it will keep running and will adjust the speed limit every interval.
	Run it in the background as a service or as a '@reboot' cronjob (cron only available on unix systems (linux and mac)).
Examples:
	--MaxSpeed 62500 --Buffer 30
		Treat the connection as 500Mbps and reserve 30% extra on top of the estimated bitrate of each stream.
	--Once
		Check once and exit. Use this to run the script at an interval with cron instead.
"""

import logging
from argparse import ArgumentParser, RawDescriptionHelpFormatter
from asyncio import Event, get_running_loop, run
from json import dumps
from signal import SIGINT, SIGTERM
from sys import exit
from typing import List, Union

from .config import Config, load_config
from .jellyfin import JellyfinClient
from .nzbget import NZBGetClient, NZBGetError
from .scheduler import Ticker
from .throttler import Throttler

logging_level = logging.INFO
logging_format = '[%(asctime)s][%(levelname)s] %(message)s'
logging_datefmt = '%H:%M:%S %d-%m-20%y'


def _parse_args(argv: Union[List[str], None] = None):
	parser = ArgumentParser(
		description='Limit the download speed of NZBGet based on the streams in Jellyfin',
		epilog='example:\n  python3 -m jellyfin_nzbget_throttler --Interval 15 --Buffer 25\n	Check every 15 seconds and reserve 25% extra bandwidth for every stream',
		formatter_class=RawDescriptionHelpFormatter)
	parser.add_argument('-i','--Interval', type=int, help='Seconds between checks (overrules check_interval)')
	parser.add_argument('-m','--MaxSpeed', type=int, help='Speed of the connection in KB/s (overrules max_connection_speed)')
	parser.add_argument('-b','--Buffer', type=int, help='Percentage of extra bandwidth to reserve for streams (overrules buffer_percentage)')
	parser.add_argument('-p','--IgnorePaused', help="Don't count paused streams (overrules ignore_paused)", action='store_true', default=None)
	parser.add_argument('-o','--Once', help='Check once and exit', action='store_true')
	parser.add_argument('-s','--Status', help='Show the status of NZBGet and exit', action='store_true')
	parser.add_argument('-d','--Debug', help='Show debug logging', action='store_true')
	return parser, parser.parse_args(argv)


async def show_status(config: Config) -> int:
	nzbget_client = NZBGetClient(config)
	try:
		status = await nzbget_client.get_status()
	except NZBGetError as e:
		logging.error(f'Error getting NZBGet status: {e}')
		return 1

	print(dumps(status, indent=4))
	print(f'Current download rate: {await nzbget_client.get_download_rate()} KB/s')
	return 0


async def run_throttler(config: Config, once: bool=False) -> int:
	shutdown = Event()
	loop = get_running_loop()
	for sig in (SIGINT, SIGTERM):
		loop.add_signal_handler(sig, shutdown.set)

	logging.info('Starting Jellyfin-NZBGet Throttler')
	logging.info(f'Jellyfin URL: {config.jellyfin_url}')
	logging.info(f'NZBGet URL: {config.nzbget_url}')
	logging.info(f'Max connection speed: {config.max_connection_speed} KB/s')
	logging.info(f'Buffer percentage: {config.buffer_percentage}%')
	logging.info(f'Check interval: {config.check_interval} seconds')
	if config.ignore_paused:
		logging.info('Ignoring paused streams')

	nzbget_client = NZBGetClient(config)
	throttler = Throttler(config, JellyfinClient(config), nzbget_client)
	logging.info(f'Current NZBGet download rate: {await nzbget_client.get_download_rate()} KB/s')

	ticker = Ticker(throttler.check_and_throttle, config.check_interval)
	if once:
		await ticker.fire()
		return 0

	if not shutdown.is_set():
		await ticker.start()
		await shutdown.wait()

	logging.info('Shutting down...')
	await ticker.stop()
	logging.info('Monitoring stopped')
	return 0


def main(argv: Union[List[str], None] = None) -> int:
	parser, args = _parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.Debug else logging_level,
		format=logging_format,
		datefmt=logging_datefmt
	)

	try:
		config = load_config(
			interval=args.Interval,
			max_speed=args.MaxSpeed,
			buffer=args.Buffer,
			skip_paused=args.IgnorePaused
		)
	except ValueError as e:
		parser.error(str(e))

	try:
		if args.Status:
			return run(show_status(config))
		return run(run_throttler(config, once=args.Once))

	except Exception:
		logging.exception('Failed to start throttler: ')
		return 1


if __name__ == '__main__':
	exit(main())
