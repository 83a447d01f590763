"""Source platform inference for submitted video URLs."""

from __future__ import annotations

from urllib.parse import urlsplit

UNKNOWN_PLATFORM = "unknown"

# Evaluated in order; the first matching rule wins.
_PLATFORM_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("youtube", ("youtube.com", "youtu.be")),
    ("tiktok", ("tiktok.com",)),
    ("instagram", ("instagram.com",)),
    ("facebook", ("facebook.com",)),
    ("twitter", ("twitter.com", "x.com")),
    ("vimeo", ("vimeo.com",)),
    ("reddit", ("reddit.com",)),
)


def _hostname(url: str) -> str:
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def infer_platform(url: str) -> str:
    """Classify ``url`` into exactly one platform tag; never raises."""
    host = _hostname(url)
    if not host:
        return UNKNOWN_PLATFORM

    for tag, domains in _PLATFORM_RULES:
        if any(_host_matches(host, domain) for domain in domains):
            return tag
    return UNKNOWN_PLATFORM
