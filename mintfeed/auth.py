"""Credential lookup: process environment first, then ``~/.env``."""

import os
from pathlib import Path


def load_env_file(path: Path | None = None) -> dict[str, str]:
    """Parse ``KEY=value`` lines from *path* (default ``~/.env``).

    Blank lines and ``#`` comments are skipped, an ``export`` prefix is
    allowed, and one pair of surrounding quotes is removed from values.
    """
    path = path or Path.home() / ".env"
    if not path.is_file():
        return {}

    env: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.removeprefix("export ").partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        env[key.strip()] = value
    return env


def lookup_env(key_name: str) -> str | None:
    """Return *key_name* from the environment or ``~/.env``, or None."""
    return os.environ.get(key_name) or load_env_file().get(key_name) or None


def get_api_key(key_name: str) -> str:
    """Return a required credential such as an API key or wallet address.

    Raises ``ValueError("<KEY> not set")`` when it is missing.
    """
    value = lookup_env(key_name)
    if not value:
        raise ValueError(f"{key_name} not set")
    return value


def get_auth_env() -> dict[str, str]:
    """Environment for the ``bird`` and mint subprocesses.

    ``~/.env`` entries fill in keys the process environment lacks.
    """
    env = dict(os.environ)
    for key, value in load_env_file().items():
        env.setdefault(key, value)
    return env
