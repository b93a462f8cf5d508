"""Request building: URL templates, query strings, and header merging.

All functions here are pure so that the exact URL and header map sent for
a given GET description can be asserted without any network traffic.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional
from urllib.parse import quote

DEFAULT_HEADERS: dict[str, str] = {
    "content-type": "application/json",
    "accept": "application/json",
}
"""Headers present on every request unless a caller overrides them."""

_TOKEN = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def expand_template(template: str, path_params: Optional[Mapping[str, Any]] = None) -> str:
    """Substitute ``:name`` tokens in *template* from *path_params*.

    Tokens are matched by exact key.  A token with no entry, or whose
    value is ``None``, stays in the result as the literal ``:name``.
    Values go through ``str()`` and are percent-encoded as one path
    segment.  Port numbers (``host:8080``) are not tokens.

    Example::

        >>> expand_template("/events/:id/players/:player", {"id": "g1"})
        '/events/g1/players/:player'
    """
    params = path_params or {}

    def _substitute(match: re.Match[str]) -> str:
        value = params.get(match.group(1))
        if value is None:
            return match.group(0)
        return quote(str(value), safe="")

    return _TOKEN.sub(_substitute, template)


def build_query(query_params: Optional[Mapping[str, Any]] = None) -> str:
    """Join *query_params* as ``key=value`` pairs with ``&``, in insertion order.

    Values are converted with ``str()``.  Returns an empty string when
    there are no parameters.
    """
    if not query_params:
        return ""
    return "&".join(f"{key}={value}" for key, value in query_params.items())


def resolve_url(
    base_url: Optional[str],
    template: str,
    path_params: Optional[Mapping[str, Any]] = None,
    query_params: Optional[Mapping[str, Any]] = None,
) -> str:
    """Build the fully-resolved URL for a GET description.

    Relative templates are appended to *base_url*; templates that already
    start with ``http://`` or ``https://`` are used as is.  The query
    string is appended with ``?`` or, when the template already carries
    one, with ``&``.
    """
    path = expand_template(template, path_params)
    if base_url and not path.startswith(("http://", "https://")):
        url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    else:
        url = path

    query = build_query(query_params)
    if query:
        url = f"{url}{'&' if '?' in url else '?'}{query}"
    return url


def merge_headers(*layers: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """Merge header maps on top of :data:`DEFAULT_HEADERS`.

    Later layers win on collision.  Names are compared case-insensitively
    and emitted in lower case; values are stringified.
    """
    merged = dict(DEFAULT_HEADERS)
    for layer in layers:
        for name, value in (layer or {}).items():
            merged[name.lower()] = str(value)
    return merged
