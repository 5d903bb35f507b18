# ============================================================================
# REMOTE DATASET URL SAFETY
# ============================================================================
# STATUS: Core - URL checks
# PURPOSE: Reject remote dataset URLs that could reach internal hosts
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: is_valid_external_url
# DEPENDENCIES: httpx
# ============================================================================
"""
Remote Dataset URL Safety.

Checks URLs that users paste as remote datasets before they are passed to
the processing service (``opt_geturl``). The service fetches these URLs
server-side, so anything that could reach internal hosts is rejected.

Exports:
    is_valid_external_url: True when a URL is safe to forward
"""

import re
from typing import Any, Optional, Tuple

import httpx

from config.defaults import UrlSafetyDefaults

ALLOWED_EXTENSION_RE = re.compile(UrlSafetyDefaults.ALLOWED_FILE_EXTENSIONS, re.IGNORECASE)
FILE_EXTENSION_RE = re.compile(r"\.[^/]+$")
DIGITS_RE = re.compile(r"^\d+$")
LINK_LOCAL_IPV6_RE = re.compile(r"^fe[89ab][0-9a-f]", re.IGNORECASE)


def _parse_ipv4(host: str) -> Optional[Tuple[int, int, int, int]]:
    parts = host.split(".")
    if len(parts) != 4 or not all(DIGITS_RE.match(part) for part in parts):
        return None
    octets = tuple(int(part) for part in parts)
    if any(octet > 255 for octet in octets):
        return None
    return octets


def _is_private_ipv4(octets: Tuple[int, int, int, int]) -> bool:
    for start, end in UrlSafetyDefaults.PRIVATE_IPV4_RANGES:
        if all(start[i] <= octets[i] <= end[i] for i in range(4)):
            return True
    return False


def _is_private_ipv6(host: str) -> bool:
    return (
        host == "::1"
        or host.startswith("::1:")
        or host == "0:0:0:0:0:0:0:1"
        or host.startswith("fc")
        or host.startswith("fd")
        or bool(LINK_LOCAL_IPV6_RE.match(host))
    )


def _has_forbidden_suffix(host: str) -> bool:
    return any(host == suffix or host.endswith(suffix) for suffix in UrlSafetyDefaults.FORBIDDEN_HOSTNAME_SUFFIXES)


def is_valid_external_url(url: Any) -> bool:
    """
    Check that a URL is safe to hand to the service as a remote dataset.

    Rules:
        - https only, at most 4000 characters, no embedded credentials
        - host must not be localhost or an intranet-style suffix
        - no private, loopback or link-local IPv4/IPv6 literals
        - when the last path segment has an extension it must be one of
          zip, kmz, json, geojson or gml

    Args:
        url: Candidate URL (anything non-string is rejected)

    Returns:
        True when the URL passes every rule
    """
    if not isinstance(url, str):
        return False
    trimmed = url.strip()
    if not trimmed or len(trimmed) > UrlSafetyDefaults.MAX_URL_LENGTH:
        return False

    try:
        parsed = httpx.URL(trimmed)
    except httpx.InvalidURL:
        return False

    if parsed.scheme != "https" or parsed.userinfo:
        return False

    host = parsed.host.lower().strip("[]")
    if not host or _has_forbidden_suffix(host):
        return False

    octets = _parse_ipv4(host)
    if octets is not None and _is_private_ipv4(octets):
        return False
    if ":" in host and _is_private_ipv6(host):
        return False

    path = parsed.path or "/"
    if FILE_EXTENSION_RE.search(path):
        query = parsed.query.decode("ascii", errors="ignore")
        path_with_query = f"{path}?{query}" if query else path
        if not ALLOWED_EXTENSION_RE.search(path_with_query):
            return False

    return True
