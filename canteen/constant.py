"""Editable static menu data."""

from __future__ import annotations

# Served whenever the menu document cannot be read or holds no usable items.
FALLBACK_MENU: list[dict[str, object]] = [
    {
        "id": 1,
        "name": "Maggie Noodles",
        "description": "52gm pack",
        "price": 12,
    },
    {
        "id": 2,
        "name": "Maggie Noodles",
        "description": "70gm pack",
        "price": 17,
    },
    {
        "id": 3,
        "name": "BourBon",
        "description": "Double-layered chocolate cream biscuits, crunchy outside and creamy inside.",
        "price": 35,
    },
    {
        "id": 4,
        "name": "Nice Time",
        "description": "Light, crispy coconut-flavored biscuits with sugar crystals on top.",
        "price": 15,
    },
    {
        "id": 5,
        "name": "Coffee",
        "description": "Quick-fix strong coffee sachet. Add hot water and stay awake.",
        "price": 3,
    },
]

NON_RETRYABLE_PHRASES: tuple[str, ...] = (
    "Invalid form data",
    "Validation failed",
    "Unauthorized",
    "Forbidden",
)

# Client errors the backend will keep rejecting no matter how often we retry.
PERMANENT_HTTP_STATUSES: frozenset[int] = frozenset({400, 401, 403, 404, 405, 410, 413, 422})

DEFAULT_ACK_MESSAGE = "Order submitted successfully"
