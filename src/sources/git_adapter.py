"""Filesystem adapter on top of a GitLab repository.

Every mutation is a commit on the configured branch. The files API only
knows single-file create/update/delete and tree listings, so the rest of
the filesystem contract is built from those:

- Directories exist only while they contain a file. create_directory()
  commits an empty `.gitkeep` marker; delete_directory() deletes the
  files directly inside the directory one commit at a time.
- move() and copy() read the source and upload it at the destination
  (move() then deletes the source). A failure after the upload leaves
  both copies in place.
- delete_directory() stops at the first failed delete; files deleted
  before it stay deleted.
- Visibility does not exist and always raises VisibilityUnsupported.

Nothing is cached and there is no locking: concurrent writers to the same
path race and the last commit wins. The client is fixed at construction;
build a new adapter to switch credentials.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from datetime import datetime, timezone
from typing import AsyncIterator, BinaryIO, Optional, Tuple, Union

from core.errors import (
    CheckExistenceFailed,
    CopyFailed,
    CreateDirectoryFailed,
    DeleteDirectoryFailed,
    DeleteFailed,
    ListingFailed,
    MetadataUnavailable,
    MoveFailed,
    NotFoundError,
    ReadFailed,
    VisibilityUnsupported,
    WriteFailed,
)
from core.interfaces import ByteStream, RepositoryClient
from core.mime import ExtensionMimeTypeDetector
from core.models import DirectoryAttributes, FileAttributes, StorageAttributes, WriteOptions
from core.paths import PathPrefixer

logger = logging.getLogger(__name__)

UPLOADED_FILE_COMMIT_MESSAGE = "Uploaded file via GitLab API"
DELETED_FILE_COMMIT_MESSAGE = "Deleted file via GitLab API"

DIRECTORY_MARKER = ".gitkeep"

# GitLab tree entry types
_TREE_TYPE_DIRECTORY = "tree"


def parse_committed_date(value: str) -> int:
    """Convert a GitLab ISO-8601 commit date to a unix timestamp."""
    raw = (value or "").strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


class GitAdapter:
    def __init__(
        self,
        client: RepositoryClient,
        prefix: str = "",
        *,
        mime_type_detector: Optional[ExtensionMimeTypeDetector] = None,
    ) -> None:
        self._client = client
        self._prefixer = PathPrefixer(prefix)
        self._mime_type_detector = mime_type_detector or ExtensionMimeTypeDetector()

    @property
    def client(self) -> RepositoryClient:
        return self._client

    @property
    def prefix(self) -> str:
        return self._prefixer.prefix

    # --- Existence ---

    async def file_exists(self, path: str) -> bool:
        try:
            await self._client.read(self._prefixer.prefix_path(path))
        except NotFoundError:
            return False
        except Exception as e:
            raise CheckExistenceFailed.for_location(path, str(e)) from e

        return True

    async def directory_exists(self, path: str) -> bool:
        """True when the first tree page under `path` has any entry.

        Any content counts, so a path prefix holding only files is reported
        as an existing directory.
        """
        try:
            async with aclosing(self._client.tree(self._prefixer.prefix_path(path))) as pages:
                async for page in pages:
                    return bool(page)
        except NotFoundError:
            return False
        except Exception as e:
            raise CheckExistenceFailed.for_location(path, str(e)) from e

        return False

    # --- Content I/O ---

    async def write(self, path: str, contents: Union[bytes, str], options: Optional[WriteOptions] = None) -> None:
        location = self._prefixer.prefix_path(path)

        try:
            override = await self.file_exists(path)

            await self._client.upload(location, contents, UPLOADED_FILE_COMMIT_MESSAGE, override)
        except Exception as e:
            logger.debug("Write of %s failed: %s", location, e)
            raise WriteFailed.at_location(path, str(e)) from e

        logger.info("%s: %s (override=%s)", UPLOADED_FILE_COMMIT_MESSAGE, location, override)

    async def write_stream(self, path: str, stream: ByteStream, options: Optional[WriteOptions] = None) -> None:
        """Write from a binary file or async byte iterator; the caller keeps ownership of the stream."""
        location = self._prefixer.prefix_path(path)

        try:
            override = await self.file_exists(path)

            await self._client.upload_stream(location, stream, UPLOADED_FILE_COMMIT_MESSAGE, override)
        except Exception as e:
            logger.debug("Streamed write of %s failed: %s", location, e)
            raise WriteFailed.at_location(path, str(e)) from e

        logger.info("%s: %s (override=%s, streamed)", UPLOADED_FILE_COMMIT_MESSAGE, location, override)

    async def read(self, path: str) -> bytes:
        try:
            return await self._client.read_raw(self._prefixer.prefix_path(path))
        except Exception as e:
            raise ReadFailed.from_location(path, str(e)) from e

    async def read_stream(self, path: str) -> BinaryIO:
        """Return an open, rewound binary file; the caller must close it."""
        try:
            resource = await self._client.read_stream(self._prefixer.prefix_path(path))
        except Exception as e:
            raise ReadFailed.from_location(path, str(e)) from e

        if resource is None:
            raise ReadFailed.from_location(path, "Empty content")

        return resource

    # --- Mutations ---

    async def delete(self, path: str) -> None:
        location = self._prefixer.prefix_path(path)

        try:
            await self._client.delete(location, DELETED_FILE_COMMIT_MESSAGE)
        except Exception as e:
            logger.debug("Delete of %s failed: %s", location, e)
            raise DeleteFailed.at_location(path, str(e)) from e

        logger.info("%s: %s", DELETED_FILE_COMMIT_MESSAGE, location)

    async def delete_directory(self, path: str) -> None:
        """Delete every file directly inside `path`, one commit each.

        Subdirectories are not descended into. Not transactional: a failed
        delete aborts, and the files deleted before it stay deleted.
        """
        location = self._prefixer.prefix_path(path)

        try:
            # Collect first; deleting while paging would shift later pages
            async with aclosing(self._iterate_tree(location, recursive=False)) as entries:
                files = [entry_path async for is_directory, entry_path in entries if not is_directory]
        except Exception as e:
            raise DeleteDirectoryFailed.at_location(path, str(e)) from e

        for file_path in files:
            try:
                await self._client.delete(file_path, DELETED_FILE_COMMIT_MESSAGE)
            except Exception as e:
                logger.debug("Delete of %s failed while deleting directory %s: %s", file_path, location, e)
                raise DeleteDirectoryFailed.at_location(path, str(e)) from e

            logger.info("%s: %s", DELETED_FILE_COMMIT_MESSAGE, file_path)

    async def create_directory(self, path: str, options: Optional[WriteOptions] = None) -> None:
        marker = f"{path.rstrip('/')}/{DIRECTORY_MARKER}"

        try:
            await self.write(marker, b"", options)
        except Exception as e:
            raise CreateDirectoryFailed.at_location(path, str(e)) from e

    async def move(self, source: str, destination: str, options: Optional[WriteOptions] = None) -> None:
        """Copy `source` to `destination`, then delete `source`.

        The destination must not exist yet. If the delete fails after the
        upload succeeded, both files remain.
        """
        try:
            contents = await self._client.read_raw(self._prefixer.prefix_path(source))

            await self._client.upload(
                self._prefixer.prefix_path(destination),
                contents,
                UPLOADED_FILE_COMMIT_MESSAGE,
            )

            await self._client.delete(self._prefixer.prefix_path(source), DELETED_FILE_COMMIT_MESSAGE)
        except Exception as e:
            raise MoveFailed.from_location_to(source, destination, str(e)) from e

        logger.info("Moved %s to %s", source, destination)

    async def copy(self, source: str, destination: str, options: Optional[WriteOptions] = None) -> None:
        """Upload the content of `source` at `destination`, which must not exist yet."""
        try:
            contents = await self._client.read_raw(self._prefixer.prefix_path(source))

            await self._client.upload(
                self._prefixer.prefix_path(destination),
                contents,
                UPLOADED_FILE_COMMIT_MESSAGE,
            )
        except Exception as e:
            raise CopyFailed.from_location_to(source, destination, str(e)) from e

        logger.info("Copied %s to %s", source, destination)

    # --- Listing ---

    async def list_contents(self, path: str, recursive: bool = False) -> AsyncIterator[StorageAttributes]:
        """Yield the entries under `path`, fetching lazily.

        Each file costs two more requests (size and last modified), made
        only when that entry is reached. Paths are relative to the prefix.
        """
        location = self._prefixer.prefix_path(path)

        try:
            async with aclosing(self._iterate_tree(location, recursive)) as entries:
                async for is_directory, entry_path in entries:
                    relative = self._prefixer.strip_prefix(entry_path)

                    if is_directory:
                        yield DirectoryAttributes(relative)
                        continue

                    size = await self.file_size(relative)
                    modified = await self.last_modified(relative)
                    yield FileAttributes(
                        relative,
                        file_size=size.file_size,
                        last_modified=modified.last_modified,
                        mime_type=self._mime_type_detector.detect_mime_type_from_path(relative),
                    )
        except Exception as e:
            raise ListingFailed.for_location(path, str(e)) from e

    async def _iterate_tree(self, location: str, recursive: bool) -> AsyncIterator[Tuple[bool, str]]:
        async with aclosing(self._client.tree(location, recursive)) as pages:
            async for page in pages:
                for item in page:
                    yield item.get("type") == _TREE_TYPE_DIRECTORY, str(item["path"])

    # --- Metadata ---

    async def mime_type(self, path: str) -> FileAttributes:
        mime_type = self._mime_type_detector.detect_mime_type_from_path(self._prefixer.prefix_path(path))

        if mime_type is None:
            raise MetadataUnavailable.mime_type(path)

        return FileAttributes(path, mime_type=mime_type)

    async def last_modified(self, path: str) -> FileAttributes:
        """Commit date of the first blame range; None when blame is empty."""
        try:
            blame = await self._client.blame(self._prefixer.prefix_path(path))

            if not blame:
                return FileAttributes(path)

            timestamp = parse_committed_date(blame[0]["commit"]["committed_date"])
        except Exception as e:
            raise MetadataUnavailable.last_modified(path, str(e)) from e

        return FileAttributes(path, last_modified=timestamp)

    async def file_size(self, path: str) -> FileAttributes:
        try:
            meta = await self._client.read(self._prefixer.prefix_path(path))
        except Exception as e:
            raise MetadataUnavailable.file_size(path, str(e)) from e

        return FileAttributes(path, file_size=meta.size or 0)

    async def visibility(self, path: str) -> FileAttributes:
        raise VisibilityUnsupported.for_location(path)

    async def set_visibility(self, path: str, visibility: str) -> None:
        raise VisibilityUnsupported.for_location(path)
