"""
Failure taxonomy for catalog loading.

Connectivity and fetch failures propagate to the catalog controller, which
tries the fallback document before surfacing anything. TransformError never
leaves the transform step: a bad record is dropped and the batch continues.
"""


class CatalogError(Exception):
    """Base class for catalog loading failures."""


class ConnectivityError(CatalogError):
    """The preflight read against the remote API did not succeed."""


class DataFetchError(CatalogError):
    """The remote API answered with an unusable response, or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FallbackValidationError(CatalogError):
    """The fallback document is unreadable or does not have the expected shape."""


class TransformError(CatalogError):
    """A single raw record could not be mapped to a Product."""
