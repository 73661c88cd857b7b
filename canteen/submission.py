"""Reliable delivery of order and feedback payloads.

A submission is validated, stamped with metadata and posted to the primary
endpoint. Transient failures are retried with exponential backoff, then each
fallback endpoint gets a single attempt. Anything that still fails lands in
the failure ledger so ``retry_failed_submissions`` can replay it later in the
session.
"""

from __future__ import annotations

import asyncio
import logging
import random
import string
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from canteen.config import SubmissionConfig
from canteen.errors import PayloadValidationError, SubmissionExhaustedError
from canteen.models import SubmissionRecord, SubmissionStats
from canteen.persistence import FAILED_LEDGER_KEY, SUCCESS_LEDGER_KEY, SubmissionLedger
from canteen.responses import interpret_response
from canteen.transport import error_for_status, is_non_retryable, post_form
from canteen.validation import validate_payload

logger = logging.getLogger(__name__)

CLIENT_VERSION = "0.1.0"
DEFAULT_USER_AGENT = f"night-canteen/{CLIENT_VERSION} python-httpx/{httpx.__version__}"

_SESSION_ALPHABET = string.digits + string.ascii_lowercase

Sleep = Callable[[float], Awaitable[Any]]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_session_id() -> str:
    """Return a throwaway tracking id; a new one is minted per submission."""
    suffix = "".join(random.choices(_SESSION_ALPHABET, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def submission_type(payload: Mapping[str, Any]) -> str:
    return "feedback" if payload.get("feedback") else "order"


@dataclass(frozen=True)
class SubmissionDebug:
    """Diagnostics handle exposed by the running app."""

    get_stats: Callable[[], SubmissionStats]
    retry_failed: Callable[[], Awaitable[int]]
    config: SubmissionConfig


class SubmissionClient:
    """Deliver payloads with retry, backoff, fallback and ledger bookkeeping."""

    def __init__(
        self,
        ledger: SubmissionLedger,
        config: SubmissionConfig | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.ledger = ledger
        self.config = config or SubmissionConfig()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.config.timeout_ms / 1000,
            headers={"User-Agent": user_agent},
        )
        self._sleep = sleep
        self.user_agent = user_agent

    async def __aenter__(self) -> SubmissionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def enrich(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Copy ``payload`` and stamp it with delivery metadata."""
        return {
            **payload,
            "timestamp": _utc_now_iso(),
            "userAgent": self.user_agent,
            "sessionId": generate_session_id(),
            "source": self.config.source,
        }

    async def submit(self, payload: Mapping[str, Any]) -> Any:
        """Validate, enrich and deliver one payload.

        Raises:
            PayloadValidationError: the payload was rejected before any I/O.
            SubmissionExhaustedError: every endpoint failed; the enriched
                payload was queued in the failure ledger.
        """
        result = validate_payload(payload)
        if not result:
            logger.error("Rejected %s payload: %s", submission_type(payload), "; ".join(result.reasons))
            raise PayloadValidationError(result.reasons)
        return await self._deliver(self.enrich(payload))

    async def _deliver(self, enriched: dict[str, Any], record_failure: bool = True) -> Any:
        label = submission_type(enriched)
        max_retries = self.config.max_retries
        last_error: Exception | None = None
        attempts = 0

        for attempt in range(1, max_retries + 1):
            attempts = attempt
            try:
                logger.info("Attempting to submit %s (attempt %d/%d)", label, attempt, max_retries)
                response = await post_form(self.client, self.config.url, enriched, self.config.timeout_ms)
                if not response.is_success:
                    raise error_for_status(response)
            except Exception as exc:
                logger.warning("Submission attempt %d failed: %s", attempt, exc)
                last_error = exc
                if is_non_retryable(exc):
                    break
                if attempt < max_retries:
                    delay_ms = self.config.retry_delay_ms * 2 ** (attempt - 1)
                    logger.info("Waiting %dms before retry...", delay_ms)
                    await self._sleep(delay_ms / 1000)
            else:
                logger.info("%s submitted successfully", label.capitalize())
                self._record_success(label)
                return interpret_response(response)

        for endpoint in self.config.fallback_endpoints:
            logger.info("Trying fallback endpoint %s", endpoint)
            try:
                response = await post_form(self.client, endpoint, enriched, self.config.timeout_ms)
                if not response.is_success:
                    raise error_for_status(response)
            except Exception as exc:
                logger.warning("Fallback endpoint %s failed: %s", endpoint, exc)
                last_error = exc
            else:
                logger.info("%s submitted via fallback endpoint %s", label.capitalize(), endpoint)
                self._record_success(label)
                return interpret_response(response)

        if record_failure:
            self._record_failure(label, enriched, attempts)
        error = SubmissionExhaustedError(label, attempts, last_error, enriched)
        logger.error("%s", error)
        raise error

    def _record_success(self, label: str) -> None:
        record = SubmissionRecord(timestamp=_utc_now_iso(), type=label, success=True)
        self.ledger.append_bounded(SUCCESS_LEDGER_KEY, record, self.config.success_capacity)

    def _record_failure(self, label: str, enriched: dict[str, Any], attempts: int) -> None:
        record = SubmissionRecord(
            timestamp=_utc_now_iso(),
            type=label,
            success=False,
            data=enriched,
            attempts=attempts,
        )
        self.ledger.append_bounded(FAILED_LEDGER_KEY, record, self.config.failed_capacity)
        logger.info("Failed submission stored for potential retry")

    async def retry_failed_submissions(self) -> int:
        """Replay the failure ledger once and return how many went through.

        Stored payloads are replayed as-is, one at a time. Entries that fail
        again are written back unchanged in a single overwrite.
        """
        snapshot = self.ledger.read_all(FAILED_LEDGER_KEY)
        if not snapshot:
            return 0

        logger.info("Retrying %d failed submissions...", len(snapshot))
        still_failed: list[SubmissionRecord] = []
        replayed = 0
        for record in snapshot:
            if record.data is None:
                logger.warning("Dropping failed submission from %s without a payload", record.timestamp)
                continue
            try:
                await self._deliver(record.data, record_failure=False)
            except Exception as exc:
                logger.warning("Retry failed, keeping for later: %s", exc)
                still_failed.append(record)
            else:
                replayed += 1
                logger.info("Successfully retried failed submission from %s", record.timestamp)

        # Keep anything other submissions queued while the sweep was awaiting.
        queued_meanwhile = [r for r in self.ledger.read_all(FAILED_LEDGER_KEY) if r not in snapshot]
        survivors = still_failed + queued_meanwhile
        self.ledger.replace_all(FAILED_LEDGER_KEY, survivors[-self.config.failed_capacity :])
        return replayed

    def get_stats(self) -> SubmissionStats:
        successful = len(self.ledger.read_all(SUCCESS_LEDGER_KEY))
        failed = len(self.ledger.read_all(FAILED_LEDGER_KEY))
        total = successful + failed
        return SubmissionStats(
            successful=successful,
            failed=failed,
            total=total,
            success_rate=successful / total if total else 0.0,
        )

    def debug_surface(self) -> SubmissionDebug:
        return SubmissionDebug(
            get_stats=self.get_stats,
            retry_failed=self.retry_failed_submissions,
            config=self.config,
        )
