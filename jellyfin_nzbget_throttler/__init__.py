"""
Limit the download speed of NZBGet based on the media that is streamed from Jellyfin
"""

__version__ = '1.0.0'
