"""Exception types raised by the outer layers of granola-md.

The extractor, classifier and Markdown converter never raise; these are for
note assembly, the API client, and the vault writer.
"""

from __future__ import annotations


class GranolaMdError(Exception):
    """Base class for granola-md errors."""


class DocumentValidationError(GranolaMdError):
    """A document record lacks the fields needed to build a note."""

    def __init__(self, message: str, *, document_id: str | None = None) -> None:
        super().__init__(message)
        self.document_id = document_id


class GranolaAPIError(GranolaMdError):
    """The Granola API returned an error or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class VaultPathError(GranolaMdError):
    """A note path resolves outside the target vault."""
