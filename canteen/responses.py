"""Turn an OK response body into a result value."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from canteen.constant import DEFAULT_ACK_MESSAGE

logger = logging.getLogger(__name__)


def interpret_response(response: httpx.Response) -> Any:
    """Parse the body of a successful response.

    An OK status already means the backend accepted the submission, so a
    body that cannot be read never turns into a failure.
    """
    try:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return response.json()

        # Apps Script backends often send JSON labelled as text.
        text = response.text
        try:
            return json.loads(text)
        except ValueError:
            return {"success": True, "message": text}
    except Exception as exc:
        logger.warning("Failed to parse response: %s", exc)
        return {"success": True, "message": DEFAULT_ACK_MESSAGE}
