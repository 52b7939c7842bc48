"""Error taxonomy for the menu import pipeline.

Every failure the pipeline can surface derives from MenuImportError so the
HTTP layer and the ledger can treat them uniformly. None of them is retried
automatically; the caller starts a new import to try again.
"""

from typing import Any


class MenuImportError(Exception):
    """Base class for all menu import failures."""


class ValidationError(MenuImportError):
    """The uploaded file was rejected (wrong type, empty, too large)."""


class StorageError(MenuImportError):
    """Writing the uploaded file to object storage failed."""


class UnsupportedFormatError(MenuImportError):
    """The input format cannot be processed (PDF menus)."""


class ExternalServiceError(MenuImportError):
    """The vision model API answered with a non-success status or was unreachable.

    Attributes:
        status_code: Upstream HTTP status, None for transport failures
        body: Upstream response body, if any
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(MenuImportError):
    """The vision model response did not contain a usable menu JSON object."""


class PartialImportError(MenuImportError):
    """Materialization stopped after some rows were already written.

    Rows written before the failure are not rolled back. The counts and the
    rows themselves are attached so the caller can decide what to clean up.
    """

    def __init__(
        self,
        message: str,
        categories_created: int,
        items_created: int,
        new_categories: list[Any] | None = None,
        new_items: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.categories_created = categories_created
        self.items_created = items_created
        self.new_categories = new_categories or []
        self.new_items = new_items or []


class RestaurantNotFoundError(MenuImportError):
    """The target restaurant does not exist."""


class PersistenceError(MenuImportError):
    """A DynamoDB write failed."""


class RecordAlreadyTerminalError(MenuImportError):
    """A terminal write was attempted on a record that is no longer processing."""
