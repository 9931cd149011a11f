"""URL helpers shared by extraction, scoring and the lead sheet."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

# Country-code public suffixes that require three labels to capture the registrable domain.
_TWO_PART_SUFFIXES = {
    "co.in",
    "net.in",
    "org.in",
    "firm.in",
    "gen.in",
    "ind.in",
    "ac.in",
    "gov.in",
    "com.au",
    "com.sg",
    "com.my",
    "co.uk",
    "co.jp",
    "co.nz",
}

_TRACKING_PREFIXES = ("utm_", "fbclid", "gclid", "mc_", "trk", "refid")


def canonicalize_url(url: str | None) -> str | None:
    """Normalize URLs for comparison and downstream display."""
    if not url:
        return None
    candidate = url.strip()
    if not candidate:
        return None
    parsed = urlparse(candidate if "://" in candidate else f"https://{candidate}")
    if not parsed.netloc:
        return None
    filtered_query = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if not key.lower().startswith(_TRACKING_PREFIXES)
    ]
    sanitized = parsed._replace(
        netloc=parsed.netloc.lower(),
        query=urlencode(filtered_query, doseq=True),
        fragment="",
    )
    return urlunparse(sanitized).rstrip("/")


def host_of(value: str | None) -> str:
    """Lowercased host without port or leading www."""
    if not value:
        return ""
    parsed = urlparse(value if "://" in value else f"https://{value}")
    host = (parsed.netloc or parsed.path).lower()
    if "@" in host:
        host = host.rsplit("@", 1)[1]
    if ":" in host:
        host = host.split(":", 1)[0]
    if "/" in host:
        host = host.split("/", 1)[0]
    if host.startswith("www."):
        host = host[4:]
    return host


def normalize_domain(value: str | None) -> str:
    """Collapse hosts into their registrable domain."""
    host = host_of(value)
    parts = [part for part in host.split(".") if part]
    if len(parts) <= 2:
        return ".".join(parts)
    suffix = ".".join(parts[-2:])
    if suffix in _TWO_PART_SUFFIXES:
        return ".".join(parts[-3:])
    return ".".join(parts[-2:])
