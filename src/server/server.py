"""Server bootstrap for the GitLab filesystem MCP service.

Creates the FastMCP instance, wires the filesystem adapter into the tools
and starts the MCP server (stdio transport).
"""

import logging
import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

from config import LOG_LEVEL
from sources.git_adapter import GitAdapter
from sources.source_factory import default_filesystem

from tools.delete_file import register as register_delete_file
from tools.list_contents import register as register_list_contents
from tools.read_file import register as register_read_file
from tools.transfer_file import register as register_transfer_file
from tools.write_file import register as register_write_file

mcp = FastMCP("gitlab-fs")


def register_tools(adapter: Optional[GitAdapter] = None) -> None:
    # One adapter (and one client, so one pacer and semaphore) for all tools
    fs = adapter or default_filesystem()

    register_read_file(mcp, adapter=fs)
    register_write_file(mcp, adapter=fs)
    register_delete_file(mcp, adapter=fs)
    register_transfer_file(mcp, adapter=fs)
    register_list_contents(mcp, adapter=fs)


def configure_logging() -> None:
    # stdout carries the MCP stdio protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    register_tools()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
