"""Validation and sanitizing helpers for user supplied input.

Handlers run these before passing text to collaborators (AI client,
downloader, voice channel manager). None of them raise; they return a
cleaned value or a boolean verdict.
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from typing import Callable, Iterable
from urllib.parse import urlsplit

from botcore.core.config import settings

logger = logging.getLogger(__name__)

_DANGEROUS_INPUT_CHARS = re.compile(r"[<>{}\[\]()&|;]")
_DANGEROUS_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_URL_PATTERN = re.compile(r"^(https?|ftp)://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
_DISCORD_ID_PATTERN = re.compile(r"^\d{17,20}$")
_CHANNEL_NAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")

_LOCAL_HOSTNAMES = {"localhost", "127.0.0.1", "::1"}
_LINK_LOCAL_MULTICAST = (
    ipaddress.ip_network("224.0.0.0/24"),
    ipaddress.ip_network("ff02::/16"),
)

PROFANITY_WORDS_DEFAULT: tuple[str, ...] = ("badword1", "badword2", "badword3")

Resolver = Callable[[str], Iterable[str]]


def sanitize_input(text: str, *, max_chars: int | None = None) -> str:
    """Strip markup/shell metacharacters and cap the length.

    Args:
        text: Raw message content.
        max_chars: Maximum length kept before trimming whitespace; defaults
            to the configured BOT_MAX_INPUT_CHARS.

    Returns:
        str: Sanitized text.
    """
    limit = max_chars if max_chars is not None else settings.bot.max_input_chars
    sanitized = _DANGEROUS_INPUT_CHARS.sub("", text)
    return sanitized[:limit].strip()


def sanitize_filename(filename: str, *, max_chars: int | None = None) -> str:
    """Make ``filename`` safe to use on disk.

    Reserved characters are removed, the name is capped, trailing dots and
    spaces are trimmed and an empty result becomes ``"unnamed"``.
    """
    limit = max_chars if max_chars is not None else settings.bot.max_filename_chars
    sanitized = _DANGEROUS_FILENAME_CHARS.sub("", filename)[:limit]
    sanitized = sanitized.rstrip(" .")
    return sanitized or "unnamed"


def is_valid_discord_id(value: str) -> bool:
    """Discord snowflakes are 17 to 20 digit numeric strings."""
    return bool(_DISCORD_ID_PATTERN.match(value))


def is_valid_channel_name(name: str) -> bool:
    if not 1 <= len(name) <= 100:
        return False
    if name.startswith("-") or name.endswith("-"):
        return False
    return bool(_CHANNEL_NAME_PATTERN.match(name))


def contains_profanity(text: str, words: Iterable[str] = PROFANITY_WORDS_DEFAULT) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in words)


def _resolve_host(host: str) -> list[str]:
    return [info[4][0] for info in socket.getaddrinfo(host, None)]


def _is_internal_address(address: str) -> bool:
    ip = ipaddress.ip_address(address.split("%", 1)[0])
    if ip.is_private or ip.is_loopback or ip.is_link_local:
        return True
    return any(ip in network for network in _LINK_LOCAL_MULTICAST if network.version == ip.version)


def validate_url(url: str, *, resolver: Resolver = _resolve_host) -> bool:
    """Check that ``url`` is a public http(s)/ftp locator.

    Hosts pointing at localhost, private, loopback or link-local addresses
    are rejected, including hostnames that resolve to such addresses. A host
    that cannot be resolved is treated as unsafe.

    Args:
        url: Locator supplied by the user.
        resolver: Returns the IP addresses of a hostname.

    Returns:
        True if the URL may be handed to the downloader.
    """
    if not _URL_PATTERN.match(url):
        return False

    try:
        host = urlsplit(url).hostname
    except ValueError:
        return False
    if not host or host in _LOCAL_HOSTNAMES:
        return False

    try:
        return not _is_internal_address(host)
    except ValueError:
        pass

    try:
        addresses = list(resolver(host))
    except OSError:
        logger.info("url_validation.unresolvable", extra={"host": host})
        return False

    if not addresses:
        return False

    for address in addresses:
        try:
            if _is_internal_address(address):
                logger.warning("url_validation.internal_host", extra={"host": host})
                return False
        except ValueError:
            return False
    return True
