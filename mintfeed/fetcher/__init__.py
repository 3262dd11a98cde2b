"""Source platform fetchers: bird CLI for posts, YouTube Data API for videos."""

from .bird_cli import BirdSource, _parse_bird_output, get_post_url, run_bird
from .extractors import parse_media_descriptor, parse_post
from .youtube import YouTubeSource, parse_video, pick_thumbnail, shorts_playlist_id, shorts_url

__all__ = [
    "BirdSource",
    "YouTubeSource",
    "_parse_bird_output",
    "get_post_url",
    "parse_media_descriptor",
    "parse_post",
    "parse_video",
    "pick_thumbnail",
    "run_bird",
    "shorts_playlist_id",
    "shorts_url",
]
