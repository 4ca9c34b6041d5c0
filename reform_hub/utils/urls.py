"""URL helpers shared by the result mapper and the page scrapers."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def is_valid_http_url(value: object) -> bool:
    """Return ``True`` for an absolute http(s) URL string.

    Empty strings, ``"#"`` placeholders, relative paths and non-strings
    are all rejected.
    """
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if not candidate or candidate == "#":
        return False
    if not _HTTP_URL_RE.match(candidate):
        return False
    try:
        return bool(urlparse(candidate).netloc)
    except ValueError:
        # e.g. an unbalanced IPv6 bracket
        return False


def resolve_against(page_url: str, ref: str) -> str | None:
    """Resolve *ref* found on *page_url* into an absolute http(s) URL.

    Handles root-relative (``/img.png``), dot-relative (``./img.png``),
    bare relative (``img.png``) and protocol-relative (``//cdn/img.png``)
    references.  Returns ``None`` when the result is not an http(s) URL.
    """
    ref = ref.strip()
    if not ref:
        return None
    if is_valid_http_url(ref):
        return ref
    base = urlparse(page_url)
    if ref.startswith("//"):
        resolved = f"{base.scheme}:{ref}"
    elif ref.startswith("/"):
        resolved = f"{base.scheme}://{base.netloc}{ref}"
    else:
        resolved = urljoin(page_url, ref)
    return resolved if is_valid_http_url(resolved) else None
