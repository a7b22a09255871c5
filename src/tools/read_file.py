"""MCP tools that read from the GitLab filesystem.

Registers 'read_file', 'file_exists' and 'directory_exists'. Reads return
UTF-8 text capped at max_chars; binary content is decoded with
replacement characters.
"""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from config import MAX_FILE_CHARS
from core.errors import ValidationError
from core.interfaces import Filesystem
from sources.source_factory import default_filesystem

TRUNCATED_SUFFIX = "\n\n...[TRUNCATED]..."


def register(mcp: FastMCP, *, adapter: Optional[Filesystem] = None) -> None:
    @mcp.tool(name="read_file")
    async def read_file(path: str = "", max_chars: int = MAX_FILE_CHARS) -> str:
        """Read a file from the repository and return its UTF-8 contents.

        Params:
          - path: file path relative to the configured root (required).
          - max_chars: maximum characters to return (default from config).

        Returns:
          The file contents as text. If the content exceeds max_chars it is
          truncated and the suffix "\n\n...[TRUNCATED]..." appended.

        Raises:
          ValidationError for missing/invalid inputs; ReadFailed when the file
          cannot be read.
        """
        if not path or not path.strip():
            raise ValidationError("Missing file path")
        if int(max_chars) <= 0:
            raise ValidationError("max_chars must be positive")

        fs = adapter or default_filesystem()
        text = (await fs.read(path)).decode("utf-8", errors="replace")
        if len(text) > max_chars:
            return text[:max_chars] + TRUNCATED_SUFFIX
        return text

    @mcp.tool(name="file_exists")
    async def file_exists(path: str = "") -> bool:
        """Return True when a file exists at `path`."""
        if not path or not path.strip():
            raise ValidationError("Missing file path")

        fs = adapter or default_filesystem()
        return await fs.file_exists(path)

    @mcp.tool(name="directory_exists")
    async def directory_exists(path: str = "") -> bool:
        """Return True when anything is stored under `path`.

        Directories only exist through the files they contain.
        """
        if not path or not path.strip():
            raise ValidationError("Missing directory path")

        fs = adapter or default_filesystem()
        return await fs.directory_exists(path)
