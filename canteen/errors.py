"""Exception types raised by the submission path."""

from __future__ import annotations

from typing import Any

from canteen.models import FailureKind


class SubmissionError(Exception):
    """Base class for submission failures."""

    kind = FailureKind.PERMANENT


class PayloadValidationError(SubmissionError):
    """The payload failed validation and was never sent."""

    def __init__(self, reasons: tuple[str, ...]) -> None:
        self.reasons = reasons
        detail = "; ".join(reasons) if reasons else "unknown reason"
        super().__init__(f"Invalid form data provided: {detail}")


class TransportError(SubmissionError):
    """A single delivery attempt failed."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.TRANSIENT, status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status


class SubmissionExhaustedError(SubmissionError):
    """Every primary attempt and every fallback endpoint failed."""

    kind = FailureKind.EXHAUSTED

    def __init__(self, label: str, attempts: int, last_error: BaseException | None, payload: dict[str, Any]) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.payload = payload
        last = str(last_error) if last_error is not None else "none recorded"
        noun = "attempt" if attempts == 1 else "attempts"
        super().__init__(f"Failed to submit {label} after {attempts} {noun}. Last error: {last}")
