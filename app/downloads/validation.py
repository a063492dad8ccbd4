"""Input checks for download requests."""

import os
import re
from urllib.parse import parse_qs, urlsplit

_YOUTUBE_HOSTS = {"youtube.com", "m.youtube.com", "music.youtube.com", "youtu.be"}
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_RESERVED_CHARS = re.compile(r'[<>:"|?*]')
_WHITESPACE = re.compile(r"\s+")

MAX_FOLDER_NAME = 80


def validate_source_url(url: str) -> bool:
    """True for single-video YouTube links (watch, shorts, youtu.be)."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https"):
        return False

    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[len("www."):]
    if host not in _YOUTUBE_HOSTS:
        return False

    if host == "youtu.be":
        return len(parts.path) > 1
    if parts.path == "/watch":
        return bool(parse_qs(parts.query).get("v", [""])[0])
    if parts.path.startswith("/shorts/"):
        return len([p for p in parts.path.split("/") if p]) >= 2
    return False


def sanitize_folder_name(name: str) -> str:
    """Clean a user-supplied folder name. Returns "" when it must be rejected."""
    raw = (name or "").strip()
    if not raw:
        return ""
    if ".." in raw or "/" in raw or "\\" in raw:
        return ""
    cleaned = _CONTROL_CHARS.sub("", raw)
    cleaned = _RESERVED_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned[:MAX_FOLDER_NAME].strip()


def is_inside_root(root: str, target: str) -> bool:
    root = os.path.abspath(root)
    target = os.path.abspath(target)
    try:
        return os.path.commonpath([root, target]) == root
    except ValueError:
        # different drives
        return False
