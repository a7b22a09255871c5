"""Incremental base64 encoding for upload payloads.

The files API takes content inside a JSON body, so the whole payload ends
up in memory once; reading the source in chunks still avoids holding the
raw bytes and the encoded text at the same time.
"""

from __future__ import annotations

import base64
from typing import AsyncIterator, Union

from core.interfaces import ByteStream

DEFAULT_CHUNK_SIZE = 64 * 1024


def _as_bytes(chunk: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


async def iter_chunks(stream: ByteStream, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    if hasattr(stream, "__aiter__"):
        async for chunk in stream:  # type: ignore[union-attr]
            yield _as_bytes(chunk)
        return

    while True:
        chunk = stream.read(chunk_size)  # type: ignore[union-attr]
        if not chunk:
            break
        yield _as_bytes(chunk)


def encode_bytes(contents: Union[bytes, str]) -> str:
    return base64.b64encode(_as_bytes(contents)).decode("ascii")


async def encode_stream(stream: ByteStream, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    parts = []
    pending = b""

    async for chunk in iter_chunks(stream, chunk_size):
        data = pending + chunk
        # Only whole 3-byte groups encode without padding
        cut = len(data) - len(data) % 3
        if cut:
            parts.append(base64.b64encode(data[:cut]).decode("ascii"))
        pending = data[cut:]

    if pending:
        parts.append(base64.b64encode(pending).decode("ascii"))
    return "".join(parts)
