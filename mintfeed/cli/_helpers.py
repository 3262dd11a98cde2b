"""Shared CLI utilities."""

import re


def _normalize_item_id_or_url(value: str) -> str:
    """Normalize a post/video argument to a bare item id when possible."""
    value = value.strip()
    if value.isdigit():
        return value

    match = re.search(r"/status/(\d+)", value)
    if match:
        return match.group(1)

    match = re.search(r"(?:/shorts/|[?&]v=|youtu\.be/)([\w-]{11})", value)
    if match:
        return match.group(1)

    return value
