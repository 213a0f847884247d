"""Catalog exceptions shared by library, rating, and playlist operations."""


class AuroraError(Exception):
    """Base exception for catalog operations."""

    pass


class NotFoundError(AuroraError):
    """Raised when a song, genre, playlist, or user does not exist."""

    def __init__(self, kind: str, item_id: object):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} {item_id} not found")


class ValidationError(AuroraError):
    """Raised when caller-supplied values are invalid."""

    pass


class UploadValidationError(ValidationError):
    """Raised when an uploaded song fails validation."""

    pass


class DuplicateError(AuroraError):
    """Raised when creating something that already exists."""

    pass


class PermissionDeniedError(AuroraError):
    """Raised when a non-admin attempts a moderation action."""

    pass
