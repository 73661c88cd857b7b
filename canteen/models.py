"""Domain models for night-canteen."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class MenuItem:
    """A sellable menu item."""

    id: int | str
    name: str
    price: float
    description: str = ""


@dataclass
class CartLine:
    """One menu item in the cart with its quantity."""

    id: int | str
    name: str
    price: float
    quantity: int = 1
    description: str = ""

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CartLine:
        return cls(
            id=raw["id"],
            name=str(raw["name"]),
            price=raw["price"],
            quantity=int(raw.get("quantity", 1)),
            description=str(raw.get("description") or ""),
        )


@dataclass
class Cart:
    """The order being built, stored under the ``order`` session key."""

    items: list[CartLine] = field(default_factory=list)
    total: float = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict[str, Any]:
        return {"items": [line.to_dict() for line in self.items], "total": self.total}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Cart:
        return cls(
            items=[CartLine.from_dict(line) for line in raw.get("items", [])],
            total=raw.get("total", 0),
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of payload validation with every failing reason."""

    valid: bool
    reasons: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.valid


class FailureKind(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    EXHAUSTED = "exhausted"


@dataclass
class SubmissionRecord:
    """A ledger entry for one delivered or abandoned submission."""

    timestamp: str
    type: str
    success: bool
    data: dict[str, Any] | None = None
    attempts: int | None = None

    def to_dict(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"timestamp": self.timestamp, "type": self.type, "success": self.success}
        if self.data is not None:
            raw["data"] = self.data
        if self.attempts is not None:
            raw["attempts"] = self.attempts
        return raw

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SubmissionRecord:
        data = raw.get("data")
        # Failure entries without a type predate the field; infer it from the payload.
        kind = raw.get("type") or ("feedback" if isinstance(data, dict) and data.get("feedback") else "order")
        return cls(
            timestamp=str(raw["timestamp"]),
            type=str(kind),
            success=bool(raw.get("success", data is None)),
            data=data,
            attempts=raw.get("attempts"),
        )


@dataclass(frozen=True)
class SubmissionStats:
    successful: int = 0
    failed: int = 0
    total: int = 0
    success_rate: float = 0.0
