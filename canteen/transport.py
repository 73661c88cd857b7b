"""One bounded multipart POST per delivery attempt."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from canteen.constant import NON_RETRYABLE_PHRASES, PERMANENT_HTTP_STATUSES
from canteen.errors import TransportError
from canteen.models import FailureKind

logger = logging.getLogger(__name__)


def _field_value(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_form_fields(payload: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten a payload into ordered form fields, dropping empty values."""
    return [(key, _field_value(value)) for key, value in payload.items() if value is not None]


async def post_form(
    client: httpx.AsyncClient,
    url: str,
    payload: Mapping[str, Any],
    timeout_ms: int,
) -> httpx.Response:
    """POST ``payload`` as multipart form fields and return the raw response.

    The attempt is cancelled once ``timeout_ms`` elapses; cancellation is
    scoped to this call only.
    """
    timeout_s = timeout_ms / 1000
    # A (None, value) pair makes httpx emit a plain form field, not a file part.
    files = [(key, (None, value)) for key, value in encode_form_fields(payload)]
    try:
        return await asyncio.wait_for(
            client.post(url, files=files, headers={"Accept": "application/json"}, timeout=timeout_s),
            timeout=timeout_s,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise TransportError(f"Request timed out after {timeout_ms}ms") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"Network error: {str(exc) or type(exc).__name__}") from exc


def error_for_status(response: httpx.Response) -> TransportError:
    """Describe a non-OK response, classified from its status code."""
    status = response.status_code
    kind = FailureKind.PERMANENT if status in PERMANENT_HTTP_STATUSES else FailureKind.TRANSIENT
    return TransportError(f"HTTP {status}: {response.reason_phrase}", kind=kind, status=status)


def is_non_retryable(error: BaseException) -> bool:
    """Whether retrying ``error`` against the same endpoint is pointless."""
    if isinstance(error, TransportError) and error.kind is FailureKind.PERMANENT:
        return True
    message = str(error).lower()
    return any(phrase.lower() in message for phrase in NON_RETRYABLE_PHRASES)
