"""Response normalisation -- maps a raw status/body pair to a JSON value or an error.

This is the single place where remote failures are classified:

======================  =============================================
Status                  Outcome
======================  =============================================
2xx, empty body         ``None``
204                     ``None``
2xx, JSON object/array  the decoded value
2xx, anything else      :class:`MalformedPayloadError` (recoverable)
401                     :class:`SessionExpiredError` (not recoverable)
any other status        :class:`UnexpectedStatusError` (recoverable)
======================  =============================================
"""

from __future__ import annotations

import json
from typing import Optional

from eventloader.client.http import RawResponse
from eventloader.exceptions import (
    MalformedPayloadError,
    SessionExpiredError,
    UnexpectedStatusError,
)
from eventloader.json_types import JSONValue


def normalize_response(response: RawResponse) -> Optional[JSONValue]:
    """Decode *response* or raise its classified error.

    Args:
        response: Status code and body text from the HTTP primitive.

    Returns:
        The decoded JSON object or array, or ``None`` for no content.

    Raises:
        SessionExpiredError: On 401.
        UnexpectedStatusError: On any other non-2xx status.
        MalformedPayloadError: When a 2xx body is not a JSON object or array.
    """
    status = response.status_code

    if status == 401:
        raise SessionExpiredError(_error_message(response))
    if not 200 <= status < 300:
        raise UnexpectedStatusError(status, _error_message(response))
    if status == 204 or not response.body.strip():
        return None

    try:
        data = json.loads(response.body)
    except ValueError as exc:
        raise MalformedPayloadError(f"Response body is not valid JSON: {exc}") from exc

    if not isinstance(data, (dict, list)):
        raise MalformedPayloadError(
            f"Expected a JSON object or array, got {type(data).__name__}"
        )
    return data


def _error_message(response: RawResponse) -> str:
    """Build ``HTTP <status>: <detail>`` from an error body, when it has one."""
    prefix = f"HTTP {response.status_code}"
    try:
        detail = json.loads(response.body) if response.body.strip() else None
    except ValueError:
        detail = response.body[:200]

    if isinstance(detail, dict):
        msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
    elif detail is None:
        msg = ""
    else:
        msg = str(detail)
    return f"{prefix}: {msg}" if msg else prefix
