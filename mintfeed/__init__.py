"""mintfeed - Republish social posts and short videos as minted content coins."""

try:
    from importlib.metadata import version

    __version__ = version("mintfeed")
except Exception:
    __version__ = "0.0.0-dev"
