from __future__ import annotations

from typing import Optional


class GitFilesystemError(Exception):
    """Base error for the GitLab filesystem."""


class ValidationError(GitFilesystemError):
    """Raised when user input is invalid."""


class ExternalServiceError(GitFilesystemError):
    """Raised when the GitLab API (or the transport to it) fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ExternalServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


# --- Filesystem operation failures ---

OPERATION_EXISTENCE_CHECK = "EXISTENCE_CHECK"
OPERATION_READ = "READ"
OPERATION_WRITE = "WRITE"
OPERATION_DELETE = "DELETE"
OPERATION_DELETE_DIRECTORY = "DELETE_DIRECTORY"
OPERATION_CREATE_DIRECTORY = "CREATE_DIRECTORY"
OPERATION_MOVE = "MOVE"
OPERATION_COPY = "COPY"
OPERATION_RETRIEVE_METADATA = "RETRIEVE_METADATA"
OPERATION_SET_VISIBILITY = "SET_VISIBILITY"


class FilesystemOperationFailed(GitFilesystemError):
    """Base for adapter failures. The underlying error is chained as __cause__."""

    operation = ""

    def __init__(self, message: str, *, location: str = "", reason: str = "") -> None:
        super().__init__(message)
        self.location = location
        self.reason = reason


def _with_reason(message: str, reason: str) -> str:
    return f"{message}: {reason}" if reason else message


class CheckExistenceFailed(FilesystemOperationFailed):
    operation = OPERATION_EXISTENCE_CHECK

    @classmethod
    def for_location(cls, path: str, reason: str = "") -> "CheckExistenceFailed":
        return cls(_with_reason(f"Unable to check existence for: {path}", reason), location=path, reason=reason)


class ReadFailed(FilesystemOperationFailed):
    operation = OPERATION_READ

    @classmethod
    def from_location(cls, path: str, reason: str = "") -> "ReadFailed":
        return cls(_with_reason(f"Unable to read file from location: {path}", reason), location=path, reason=reason)


class WriteFailed(FilesystemOperationFailed):
    operation = OPERATION_WRITE

    @classmethod
    def at_location(cls, path: str, reason: str = "") -> "WriteFailed":
        return cls(_with_reason(f"Unable to write file at location: {path}", reason), location=path, reason=reason)


class DeleteFailed(FilesystemOperationFailed):
    operation = OPERATION_DELETE

    @classmethod
    def at_location(cls, path: str, reason: str = "") -> "DeleteFailed":
        return cls(_with_reason(f"Unable to delete file located at: {path}", reason), location=path, reason=reason)


class DeleteDirectoryFailed(FilesystemOperationFailed):
    """Raised when any file of a directory could not be deleted.

    Files deleted before the failure stay deleted.
    """

    operation = OPERATION_DELETE_DIRECTORY

    @classmethod
    def at_location(cls, path: str, reason: str = "") -> "DeleteDirectoryFailed":
        return cls(_with_reason(f"Unable to delete directory located at: {path}", reason), location=path, reason=reason)


class CreateDirectoryFailed(FilesystemOperationFailed):
    operation = OPERATION_CREATE_DIRECTORY

    @classmethod
    def at_location(cls, path: str, reason: str = "") -> "CreateDirectoryFailed":
        return cls(_with_reason(f"Unable to create a directory at {path}", reason), location=path, reason=reason)


class _TransferFailed(FilesystemOperationFailed):
    def __init__(self, message: str, *, source: str, destination: str, reason: str = "") -> None:
        super().__init__(message, location=source, reason=reason)
        self.source = source
        self.destination = destination


class MoveFailed(_TransferFailed):
    operation = OPERATION_MOVE

    @classmethod
    def from_location_to(cls, source: str, destination: str, reason: str = "") -> "MoveFailed":
        message = _with_reason(f"Unable to move file from {source} to {destination}", reason)
        return cls(message, source=source, destination=destination, reason=reason)


class CopyFailed(_TransferFailed):
    operation = OPERATION_COPY

    @classmethod
    def from_location_to(cls, source: str, destination: str, reason: str = "") -> "CopyFailed":
        message = _with_reason(f"Unable to copy file from {source} to {destination}", reason)
        return cls(message, source=source, destination=destination, reason=reason)


class MetadataUnavailable(FilesystemOperationFailed):
    operation = OPERATION_RETRIEVE_METADATA

    def __init__(self, message: str, *, location: str, metadata_type: str, reason: str = "") -> None:
        super().__init__(message, location=location, reason=reason)
        self.metadata_type = metadata_type

    @classmethod
    def create(cls, path: str, metadata_type: str, reason: str = "") -> "MetadataUnavailable":
        message = _with_reason(f"Unable to retrieve the {metadata_type} for file at location: {path}", reason)
        return cls(message, location=path, metadata_type=metadata_type, reason=reason)

    @classmethod
    def file_size(cls, path: str, reason: str = "") -> "MetadataUnavailable":
        return cls.create(path, "file_size", reason)

    @classmethod
    def mime_type(cls, path: str, reason: str = "") -> "MetadataUnavailable":
        return cls.create(path, "mime_type", reason)

    @classmethod
    def last_modified(cls, path: str, reason: str = "") -> "MetadataUnavailable":
        return cls.create(path, "last_modified", reason)


class VisibilityUnsupported(FilesystemOperationFailed):
    """The GitLab API has no notion of file visibility."""

    operation = OPERATION_SET_VISIBILITY

    @classmethod
    def for_location(cls, path: str) -> "VisibilityUnsupported":
        return cls("GitLab API does not support visibility.", location=path, reason="unsupported")


class ListingFailed(FilesystemOperationFailed):
    operation = OPERATION_READ

    @classmethod
    def for_location(cls, path: str, reason: str = "") -> "ListingFailed":
        return cls(_with_reason(f"Unable to retrieve the file tree at: {path}", reason), location=path, reason=reason)
