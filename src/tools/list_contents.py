"""MCP tools that list the GitLab filesystem and report file metadata.

Registers 'list_contents' and 'file_metadata'.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from core.errors import MetadataUnavailable, ValidationError
from core.interfaces import Filesystem
from sources.source_factory import default_filesystem


def register(mcp: FastMCP, *, adapter: Optional[Filesystem] = None) -> None:
    @mcp.tool(name="list_contents")
    async def list_contents(path: str = ".", recursive: bool = False) -> List[Dict[str, Any]]:
        """List files and directories under a path.

        Params:
          - path: directory relative to the configured root (default: root).
          - recursive: include all descendants (default: False).

        Returns:
          One dict per entry with "type" ("file" or "dir") and "path"; files
          also carry "file_size", "last_modified" (unix seconds) and
          "mime_type".

        Raises:
          ListingFailed when the tree or any file's metadata cannot be read.
        """
        fs = adapter or default_filesystem()
        return [entry.to_dict() async for entry in fs.list_contents(path or ".", recursive)]

    @mcp.tool(name="file_metadata")
    async def file_metadata(path: str = "") -> Dict[str, Any]:
        """Return size, last modification time and MIME type of a file.

        mime_type is None when the extension is unknown.
        """
        if not path or not path.strip():
            raise ValidationError("Missing file path")

        fs = adapter or default_filesystem()
        size = await fs.file_size(path)
        modified = await fs.last_modified(path)
        try:
            mime_type = (await fs.mime_type(path)).mime_type
        except MetadataUnavailable:
            mime_type = None

        return {
            "path": path,
            "file_size": size.file_size,
            "last_modified": modified.last_modified,
            "mime_type": mime_type,
        }
