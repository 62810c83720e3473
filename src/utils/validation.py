"""
Target address validation utilities.

This module turns whatever the user typed into a well-formed web address
and derives the canonical origin that is reported back to them.
"""

import re
from typing import Optional
from urllib.parse import SplitResult, urlsplit

from src.time.errors import INVALID_URL, URL_REQUIRED, InvalidInput

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOST_RE = re.compile(r"^[A-Za-z0-9._~-]+$")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_address(raw: Optional[str]) -> str:
    """
    Normalize a raw address into a web address with a scheme.

    Inputs without ``http://`` or ``https://`` get ``https://`` prepended.
    Already-normalized addresses come back unchanged.

    Raises:
        InvalidInput: if the input is empty or does not parse as an address
    """
    if raw is None:
        raise InvalidInput(URL_REQUIRED)
    if not isinstance(raw, str):
        raise InvalidInput(INVALID_URL)

    address = raw.strip()
    if not address:
        raise InvalidInput(URL_REQUIRED)

    if not _SCHEME_RE.match(address):
        address = f"https://{address}"

    _parse(address)
    return address


def canonical_origin(address: str) -> str:
    """Return ``scheme://host[:port]`` for an address, without path."""
    parts = _parse(address)
    scheme = parts.scheme.lower()
    host = _ascii_host(parts.hostname)
    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def _parse(address: str) -> SplitResult:
    if any(ch.isspace() for ch in address):
        raise InvalidInput(INVALID_URL)

    try:
        parts = urlsplit(address)
        # Accessing .port validates it
        parts.port
    except ValueError as exc:
        raise InvalidInput(INVALID_URL) from exc

    if parts.scheme.lower() not in _DEFAULT_PORTS or not parts.hostname:
        raise InvalidInput(INVALID_URL)
    if parts.netloc.endswith(":") and parts.port is None:
        raise InvalidInput(INVALID_URL)

    _ascii_host(parts.hostname)
    return parts


def _ascii_host(hostname: str) -> str:
    """IDNA-encode a hostname, rejecting anything that is not a valid host."""
    if ":" in hostname:
        # IPv6 literal, already validated by urlsplit
        return hostname.lower()
    try:
        encoded = hostname.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise InvalidInput(INVALID_URL) from exc
    if not _HOST_RE.match(encoded):
        raise InvalidInput(INVALID_URL)
    return encoded.lower()
