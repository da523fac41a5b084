"""Domain errors raised before anything is written to the store."""

from __future__ import annotations


class ValidationError(ValueError):
    """A precondition of an inventory operation does not hold."""


class InsufficientStockError(ValidationError):
    """Raised when a sale asks for more units than the variant holds."""

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock: only {available} unit(s) available, {requested} requested."
        )
        self.available = available
        self.requested = requested


class RecordDecodeError(ValueError):
    """A row returned by the data store does not match the expected shape."""

    def __init__(self, table: str, row_id: object, detail: str) -> None:
        super().__init__(f"Malformed row in {table} (id={row_id!r}): {detail}")
        self.table = table
        self.row_id = row_id
        self.detail = detail


class NotFoundError(LookupError):
    """A record referenced by id does not exist in the store."""

    def __init__(self, table: str, record_id: object) -> None:
        super().__init__(f"No row in {table} with id {record_id!r}")
        self.table = table
        self.record_id = record_id
