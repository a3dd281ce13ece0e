"""Error taxonomy for inventory operations.

Every error carries a ``kind`` (stable machine-readable label) and a ``title``
(short human-readable heading) so the notification boundary and the HTTP
layer can report it without inspecting the class hierarchy.
"""

from __future__ import annotations

from typing import List, Optional


class InventoryError(Exception):
    """Base class for all inventory failures."""

    kind = "inventory_error"
    title = "Something went wrong"
    # Set once the error has reached the notification area.
    reported = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """Blank or malformed input, detected locally before any network call."""

    kind = "validation_error"
    title = "Invalid input"


class InvalidInput(ValidationError):
    """An image was rejected by the upload allow-list or size ceiling."""

    kind = "invalid_input"
    title = "Invalid image"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class DuplicateError(InventoryError):
    kind = "duplicate"
    title = "Section already exists"


class UnknownLocationError(InventoryError):
    kind = "unknown_location"
    title = "Unknown section"


class NotEmptyError(InventoryError):
    kind = "not_empty"
    title = "Section is not empty"

    def __init__(self, message: str, item_count: int) -> None:
        super().__init__(message)
        self.item_count = item_count


class NotFoundError(InventoryError):
    kind = "not_found"
    title = "Not found"


class UploadFailed(InventoryError):
    """Object storage rejected or failed the write."""

    kind = "upload_failed"
    title = "Image upload failed"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class PersistenceError(InventoryError):
    """Generic remote failure on select/insert/update/delete."""

    kind = "persistence_error"
    title = "Could not save changes"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class RenameCascadeError(PersistenceError):
    """The section was renamed but some items still point at the old name."""

    kind = "rename_incomplete"
    title = "Section rename incomplete"

    def __init__(
        self,
        message: str,
        section_id: str,
        failed_item_ids: List[str],
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, cause)
        self.section_id = section_id
        self.failed_item_ids = list(failed_item_ids)


class OperationAbandoned(InventoryError):
    """The caller signalled abandonment; any boundary result was ignored."""

    kind = "abandoned"
    title = "Cancelled"


__all__ = [
    "DuplicateError",
    "InvalidInput",
    "InventoryError",
    "NotEmptyError",
    "NotFoundError",
    "OperationAbandoned",
    "PersistenceError",
    "RenameCascadeError",
    "UnknownLocationError",
    "UploadFailed",
    "ValidationError",
]
