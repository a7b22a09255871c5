"""Extension based MIME type detection.

The standard library registry is platform dependent (and misses several
text formats on older interpreters), so an explicit table is consulted
first and `mimetypes` only as a fallback.
"""

from __future__ import annotations

import mimetypes
import posixpath
from typing import Mapping, Optional


DEFAULT_EXTENSION_MAP: Mapping[str, str] = {
    "md": "text/markdown",
    "markdown": "text/markdown",
    "txt": "text/plain",
    "csv": "text/csv",
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "mjs": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "yml": "application/x-yaml",
    "yaml": "application/x-yaml",
    "toml": "application/toml",
    "py": "text/x-python",
    "php": "application/x-httpd-php",
    "sh": "application/x-sh",
    "svg": "image/svg+xml",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "pdf": "application/pdf",
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
}


class ExtensionMimeTypeDetector:
    def __init__(self, extension_map: Optional[Mapping[str, str]] = None) -> None:
        self._map = {k.lower(): v for k, v in (extension_map or DEFAULT_EXTENSION_MAP).items()}

    def detect_mime_type_from_path(self, path: str) -> Optional[str]:
        name = posixpath.basename((path or "").replace("\\", "/"))
        stem, dot, ext = name.rpartition(".")
        # Hidden files like ".gitkeep" and extensionless names have no type
        if not dot or not stem or not ext:
            return None

        ext = ext.lower()
        if ext in self._map:
            return self._map[ext]

        guessed, _encoding = mimetypes.guess_type(f"file.{ext}", strict=False)
        return guessed
