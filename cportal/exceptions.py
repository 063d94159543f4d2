"""
Exceptions for the portal engine.

Every error carries a structured code for programmatic handling. Validation and
stock rejections are caught by the portal and returned as data; data-access
failures propagate to the caller.
"""

from typing import Any


class PortalError(Exception):
    """
    Base error with a code, a human-readable message and context data.

    Usage:
        try:
            validate_order(payload, ...)
        except InsufficientStockError as e:
            print(f"Only {e.available_kg} kg available")
    """

    default_code = "PORTAL_ERROR"

    def __init__(self, message: str, code: str | None = None, **data: Any):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data = data

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            "code": self.code,
            "message": self.message,
            "data": {
                k: v.isoformat() if hasattr(v, "isoformat") else v
                for k, v in self.data.items()
            },
        }


class OrderValidationError(PortalError):
    """A candidate order field is missing, malformed or not allowed."""

    default_code = "INVALID_FIELD"

    def __init__(self, field: str, message: str, **data: Any):
        super().__init__(message, field=field, **data)
        self.field = field


class InsufficientStockError(OrderValidationError):
    """Not enough free stock for the requested quantity."""

    default_code = "INSUFFICIENT_STOCK"

    def __init__(self, message: str, requested_kg: int, available_kg: int, **data: Any):
        super().__init__(
            "quantity_kg",
            message,
            requested_kg=requested_kg,
            available_kg=available_kg,
            **data,
        )

    @property
    def requested_kg(self) -> int:
        return self.data["requested_kg"]

    @property
    def available_kg(self) -> int:
        return self.data["available_kg"]


class DataAccessError(PortalError):
    """Reading from or writing to the data store failed."""

    default_code = "DATA_ACCESS"
