"""Immutable dataclasses describing filesystem entries and remote metadata.

Listings yield either FileAttributes or DirectoryAttributes; the `type`
field tells them apart ("file" / "dir"). FileMetadata is the parsed result
of a metadata (HEAD) request against the GitLab files API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Union


EntryType = Literal["file", "dir"]


@dataclass(frozen=True)
class FileAttributes:
    """A file entry; every metadata field is optional.

    last_modified is a unix timestamp (seconds).
    """

    path: str
    file_size: Optional[int] = None
    last_modified: Optional[int] = None
    mime_type: Optional[str] = None

    type: EntryType = field(default="file", init=False)

    def is_file(self) -> bool:
        return True

    def is_dir(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "path": self.path,
            "file_size": self.file_size,
            "last_modified": self.last_modified,
            "mime_type": self.mime_type,
        }


@dataclass(frozen=True)
class DirectoryAttributes:
    path: str

    type: EntryType = field(default="dir", init=False)

    def is_file(self) -> bool:
        return False

    def is_dir(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "path": self.path}


StorageAttributes = Union[FileAttributes, DirectoryAttributes]


@dataclass(frozen=True)
class FileMetadata:
    """File metadata as reported by the X-Gitlab-* response headers."""

    file_path: str
    size: Optional[int] = None
    file_name: Optional[str] = None
    encoding: Optional[str] = None
    ref: Optional[str] = None
    blob_id: Optional[str] = None
    commit_id: Optional[str] = None
    last_commit_id: Optional[str] = None
    content_sha256: Optional[str] = None


@dataclass(frozen=True)
class WriteOptions:
    """Options accepted by write-like operations.

    The repository has no per-file visibility or permissions, so nothing here
    reaches the remote; kept so callers can pass options uniformly.
    """

    visibility: Optional[str] = None
    directory_visibility: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
