from typing import List


class MasjidDirectoryError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(MasjidDirectoryError):
    """Request is missing a required field or carries a malformed value."""


class GeocodingError(MasjidDirectoryError):
    """The geocoding service returned no usable candidate for an address."""


class DocumentValidationError(MasjidDirectoryError):
    """A document failed field-level validation before persistence."""

    def __init__(self, details: List[str]):
        super().__init__("Validation failed")
        self.details = details


class NotFoundError(MasjidDirectoryError):
    status_code = 404


class StoreUnavailableError(MasjidDirectoryError):
    status_code = 503

    def __init__(self, message: str = "Document store unavailable"):
        super().__init__(message)


class ConflictError(MasjidDirectoryError):
    status_code = 409


class AuthenticationError(MasjidDirectoryError):
    status_code = 401
