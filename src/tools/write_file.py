"""MCP tools that commit new content to the GitLab filesystem.

Registers 'write_file' and 'create_directory'. Each call is one commit.
"""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from core.interfaces import Filesystem
from sources.git_adapter import DIRECTORY_MARKER
from sources.source_factory import default_filesystem


def register(mcp: FastMCP, *, adapter: Optional[Filesystem] = None) -> None:
    @mcp.tool(name="write_file")
    async def write_file(path: str = "", content: str = "") -> str:
        """Create or overwrite a text file.

        Params:
          - path: file path relative to the configured root (required).
          - content: UTF-8 text to store (may be empty).

        Returns:
          The path that was written.

        Raises:
          ValidationError for a missing path; WriteFailed when the commit fails.
        """
        if not path or not path.strip():
            raise ValidationError("Missing file path")

        fs = adapter or default_filesystem()
        await fs.write(path, content.encode("utf-8"))
        return path

    @mcp.tool(name="create_directory")
    async def create_directory(path: str = "") -> str:
        """Create a directory by committing an empty marker file inside it.

        Returns the marker path.
        """
        if not path or not path.strip():
            raise ValidationError("Missing directory path")

        fs = adapter or default_filesystem()
        await fs.create_directory(path)
        return f"{path.rstrip('/')}/{DIRECTORY_MARKER}"
