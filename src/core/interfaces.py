"""Core protocol and interface definitions.

RepositoryClient is the contract the filesystem adapter needs from a
version-control hosting API; Filesystem is the capability surface the
adapter exposes upward (to the MCP tools or any other consumer).
"""

from __future__ import annotations

from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    BinaryIO,
    Dict,
    List,
    Optional,
    Protocol,
    Union,
)

from core.models import FileAttributes, FileMetadata, StorageAttributes, WriteOptions


ByteStream = Union[BinaryIO, AsyncIterable[bytes]]


class RepositoryClient(Protocol):
    """Contract for a remote repository API (GitLab, or a fake in tests).

    Missing paths raise core.errors.NotFoundError.
    """

    async def read(self, path: str) -> FileMetadata:
        ...

    async def read_raw(self, path: str) -> bytes:
        ...

    async def read_stream(self, path: str) -> Optional[BinaryIO]:
        ...

    async def upload(
        self,
        path: str,
        contents: bytes,
        commit_message: str,
        override: bool = False,
    ) -> Dict[str, Any]:
        ...

    async def upload_stream(
        self,
        path: str,
        stream: ByteStream,
        commit_message: str,
        override: bool = False,
    ) -> Dict[str, Any]:
        ...

    async def delete(self, path: str, commit_message: str) -> None:
        ...

    def tree(self, path: Optional[str] = None, recursive: bool = False) -> AsyncIterator[List[Dict[str, Any]]]:
        ...

    async def blame(self, path: str) -> List[Dict[str, Any]]:
        ...


class Filesystem(Protocol):
    """Contract for a hierarchical file store."""

    async def file_exists(self, path: str) -> bool:
        ...

    async def directory_exists(self, path: str) -> bool:
        ...

    async def write(self, path: str, contents: bytes, options: Optional[WriteOptions] = None) -> None:
        ...

    async def write_stream(self, path: str, stream: ByteStream, options: Optional[WriteOptions] = None) -> None:
        ...

    async def read(self, path: str) -> bytes:
        ...

    async def read_stream(self, path: str) -> BinaryIO:
        ...

    async def delete(self, path: str) -> None:
        ...

    async def delete_directory(self, path: str) -> None:
        ...

    async def create_directory(self, path: str, options: Optional[WriteOptions] = None) -> None:
        ...

    async def move(self, source: str, destination: str, options: Optional[WriteOptions] = None) -> None:
        ...

    async def copy(self, source: str, destination: str, options: Optional[WriteOptions] = None) -> None:
        ...

    def list_contents(self, path: str, recursive: bool = False) -> AsyncIterator[StorageAttributes]:
        ...

    async def mime_type(self, path: str) -> FileAttributes:
        ...

    async def last_modified(self, path: str) -> FileAttributes:
        ...

    async def file_size(self, path: str) -> FileAttributes:
        ...

    async def visibility(self, path: str) -> FileAttributes:
        ...

    async def set_visibility(self, path: str, visibility: str) -> None:
        ...
