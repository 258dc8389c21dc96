"""
core/urls.py -- URL normalization and avatar derivation.

normalize_url() cleans user-supplied profile links (website, social) before
they are stored:
  - scheme-less input gets a scheme ("//host" and "host/path" both work)
  - force_https rewrites http:// to https://
  - host is lowercased, a leading "www." is dropped, default ports removed
  - duplicate and trailing slashes in the path are removed
  - utm_* tracking parameters are dropped and the rest sorted by key

gravatar_url() derives the avatar stored on a User at registration time.
"""

import hashlib
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

GRAVATAR_BASE = "//www.gravatar.com/avatar/"

_DEFAULT_PORTS = {"http": 80, "https": 443}
_WWW_RE = re.compile(r"^www\.(?!www\.)[a-z\-\d]{1,63}\.[a-z.\-\d]{2,63}$")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+\-.]*://")


def normalize_url(url: str, force_https: bool = False) -> str:
    """Return a canonical form of url. Empty input returns an empty string.

    Raises ValueError for input urllib cannot split, such as a non-numeric
    or out-of-range port or an unterminated IPv6 literal.
    """
    url = url.strip()
    if not url:
        return ""

    if url.startswith("//"):
        url = "http:" + url
    elif not _SCHEME_RE.match(url):
        url = "http://" + url

    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if force_https and scheme == "http":
        scheme = "https"

    host = (parts.hostname or "").rstrip(".")
    if _WWW_RE.match(host):
        host = host[4:]
    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if parts.port and parts.port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{parts.port}"
    if parts.username:
        auth = parts.username
        if parts.password:
            auth = f"{auth}:{parts.password}"
        netloc = f"{auth}@{netloc}"

    path = re.sub(r"/{2,}", "/", parts.path)
    path = path.rstrip("/")

    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if not k.startswith("utm_")]
    query = urlencode(sorted(params))

    return urlunsplit((scheme, netloc, path, query, parts.fragment))


def gravatar_url(email: str, size: int = 200, rating: str = "pg", default: str = "mm") -> str:
    """Return the https Gravatar URL for an email address."""
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()  # noqa: S324 -- Gravatar's key format
    raw = f"{GRAVATAR_BASE}{digest}?s={size}&r={rating}&d={default}"
    return normalize_url(raw, force_https=True)
