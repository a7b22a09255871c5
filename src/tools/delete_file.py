"""MCP tools that delete from the GitLab filesystem.

Registers 'delete_file' and 'delete_directory'. delete_directory removes the
files directly inside the directory, one commit per file, and is not
transactional.
"""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from core.interfaces import Filesystem
from sources.source_factory import default_filesystem


def register(mcp: FastMCP, *, adapter: Optional[Filesystem] = None) -> None:
    @mcp.tool(name="delete_file")
    async def delete_file(path: str = "") -> str:
        """Delete a single file. Returns the deleted path."""
        if not path or not path.strip():
            raise ValidationError("Missing file path")

        fs = adapter or default_filesystem()
        await fs.delete(path)
        return path

    @mcp.tool(name="delete_directory")
    async def delete_directory(path: str = "") -> str:
        """Delete the files directly inside a directory.

        The repository root cannot be deleted this way. If one delete fails
        the files removed before it stay removed.
        """
        if not path or not path.strip("/ ."):
            raise ValidationError("Missing directory path")

        fs = adapter or default_filesystem()
        await fs.delete_directory(path)
        return path
