"""MCP tools that move and copy files inside the GitLab repository.

Registers 'move_file' and 'copy_file'. Neither is atomic: the content is
read, committed at the destination and (for a move) the source deleted in
a separate commit.
"""

from __future__ import annotations

from typing import Dict, Optional

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from core.interfaces import Filesystem
from sources.source_factory import default_filesystem


def _validate(source: str, destination: str) -> None:
    if not source or not source.strip():
        raise ValidationError("Missing source path")
    if not destination or not destination.strip():
        raise ValidationError("Missing destination path")


def register(mcp: FastMCP, *, adapter: Optional[Filesystem] = None) -> None:
    @mcp.tool(name="move_file")
    async def move_file(source: str = "", destination: str = "") -> Dict[str, str]:
        """Move a file; the destination must not exist yet."""
        _validate(source, destination)

        fs = adapter or default_filesystem()
        await fs.move(source, destination)
        return {"source": source, "destination": destination}

    @mcp.tool(name="copy_file")
    async def copy_file(source: str = "", destination: str = "") -> Dict[str, str]:
        """Copy a file; the destination must not exist yet."""
        _validate(source, destination)

        fs = adapter or default_filesystem()
        await fs.copy(source, destination)
        return {"source": source, "destination": destination}
