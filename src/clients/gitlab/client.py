"""GitLab client module: repository file and tree operations over the REST API (v4).

This module provides a small async client covering what the filesystem
adapter needs from GitLab: file metadata, raw and streamed reads, commits
that create/update/delete a single file, paginated tree listings and blame.
It paces requests by GitLab's reported quota (`.pacing.QuotaPacer`) and uses
`core.rate_limiter.RateLimiter` to honor explicit server-side throttling.
Nothing is cached: every call reflects the latest commit on the branch.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from typing import Any, AsyncIterator, BinaryIO, Dict, List, Mapping, Optional, Union

import httpx

from core.errors import ExternalServiceError, NotFoundError
from core.interfaces import ByteStream
from core.models import FileMetadata
from core.rate_limiter import RateLimiter

from .encoding import encode_bytes, encode_stream
from .pacing import QuotaPacer
from .inputs import (
    encode_segment,
    normalize_branch,
    normalize_page_size,
    normalize_path,
    normalize_project_id,
    normalize_tree_path,
)
from .refs import fetch_default_branch

logger = logging.getLogger(__name__)


def _header_int(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = (headers.get(name) or "").strip()
    if not value.isdigit():
        return None
    return int(value)


def parse_file_metadata(headers: Mapping[str, str], path: str) -> FileMetadata:
    """Build FileMetadata from the X-Gitlab-* headers of a files API response."""
    return FileMetadata(
        file_path=headers.get("X-Gitlab-File-Path") or path,
        size=_header_int(headers, "X-Gitlab-Size"),
        file_name=headers.get("X-Gitlab-File-Name"),
        encoding=headers.get("X-Gitlab-Encoding"),
        ref=headers.get("X-Gitlab-Ref"),
        blob_id=headers.get("X-Gitlab-Blob-Id"),
        commit_id=headers.get("X-Gitlab-Commit-Id"),
        last_commit_id=headers.get("X-Gitlab-Last-Commit-Id"),
        content_sha256=headers.get("X-Gitlab-Content-Sha256"),
    )


class GitLabClient:
    """Async GitLab client for a single project and branch.

    Purpose:
      - read(path) -> FileMetadata               (HEAD files/:path)
      - read_raw(path) -> bytes                  (GET files/:path/raw)
      - read_stream(path) -> BinaryIO | None     (streamed GET files/:path/raw)
      - upload(path, contents, message, override) / upload_stream(...)
      - delete(path, message)
      - tree(path, recursive) -> async iterator of pages
      - blame(path) -> list of blame ranges

    Key behavior:
      - 404 responses raise NotFoundError, other failures ExternalServiceError.
      - Limits concurrency (Semaphore) and paces requests by the RateLimit-* quota headers.
      - Honors server-side throttling (Retry-After, RateLimit-Reset) via RateLimiter.
      - When no branch is given, the project's default branch is resolved once.
    """

    DEFAULT_BASE_URL = "https://gitlab.com"
    API_PATH = "/api/v4"
    USER_AGENT = "gitlab-fs"

    _MAX_RATE_LIMIT_RETRIES = 2  # total attempts = 1 + retries
    _SPOOL_MAX_SIZE = 1024 * 1024  # read_stream spills to disk past this size

    def __init__(
        self,
        *,
        project_id: Union[int, str],
        branch: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 20.0,
        verify: bool = True,
        max_concurrency: int = 5,
        rate_per_sec: float = 5.0,
        tree_page_size: int = 100,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._project_id = normalize_project_id(project_id)
        self._branch = normalize_branch(branch)
        self._base_url = (base_url or self.DEFAULT_BASE_URL).strip().rstrip("/") + self.API_PATH
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._tree_page_size = normalize_page_size(tree_page_size)

        self._headers = self._build_headers(token)

        self._sem = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._pacer = QuotaPacer(rate_per_sec=rate_per_sec)
        self._rate_limiter = rate_limiter or RateLimiter()

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get_branch(self) -> str:
        """Return the configured branch, resolving the default branch on first use."""
        if self._branch is None:
            async with self._create_client() as client:
                try:
                    self._branch = await fetch_default_branch(self._request, client, project=self._project_path())
                except httpx.HTTPStatusError as e:
                    raise self._external("default_branch", e, e.response.status_code) from e
            logger.debug("Resolved default branch of %s: %s", self._project_id, self._branch)
        return self._branch

    # --- Files API ---

    async def read(self, path: str) -> FileMetadata:
        """Return file metadata without downloading the content."""
        path_clean = normalize_path(path)
        branch = await self.get_branch()

        async with self._create_client() as client:
            resp = await self._request(client, "HEAD", self._file_url(path_clean), params={"ref": branch})
            if resp.status_code == 404:
                raise NotFoundError(f"File not found: {path_clean}")

            self._raise_for_status(resp, context="read(metadata)")
            return parse_file_metadata(resp.headers, path_clean)

    async def read_raw(self, path: str) -> bytes:
        path_clean = normalize_path(path)
        branch = await self.get_branch()

        async with self._create_client() as client:
            resp = await self._request(client, "GET", self._file_url(path_clean, "raw"), params={"ref": branch})
            if resp.status_code == 404:
                raise NotFoundError(f"File not found: {path_clean}")

            self._raise_for_status(resp, context="read_raw")
            return resp.content

    async def read_stream(self, path: str) -> Optional[BinaryIO]:
        """Download a file chunk by chunk into a temporary file.

        The returned file is rewound and open; the caller must close it.
        Returns None when the file has no content.
        """
        path_clean = normalize_path(path)
        branch = await self.get_branch()

        spool = tempfile.SpooledTemporaryFile(max_size=self._SPOOL_MAX_SIZE, mode="w+b")
        try:
            async with self._create_client() as client:
                resp = await self._request(
                    client,
                    "GET",
                    self._file_url(path_clean, "raw"),
                    params={"ref": branch},
                    stream=True,
                )
                try:
                    if resp.status_code == 404:
                        raise NotFoundError(f"File not found: {path_clean}")

                    self._raise_for_status(resp, context="read_stream")
                    async for chunk in resp.aiter_bytes():
                        spool.write(chunk)
                finally:
                    await resp.aclose()
        except BaseException:
            spool.close()
            raise

        if spool.tell() == 0:
            spool.close()
            return None

        spool.seek(0)
        return spool  # type: ignore[return-value]

    async def upload(
        self,
        path: str,
        contents: Union[bytes, str],
        commit_message: str,
        override: bool = False,
    ) -> Dict[str, Any]:
        """Commit `contents` at `path`; create it, or update it when `override` is set."""
        return await self._commit_file(path, encode_bytes(contents), commit_message, override)

    async def upload_stream(
        self,
        path: str,
        stream: ByteStream,
        commit_message: str,
        override: bool = False,
    ) -> Dict[str, Any]:
        """Like upload(), reading the content from a binary file or async byte iterator.

        The stream is not closed.
        """
        return await self._commit_file(path, await encode_stream(stream), commit_message, override)

    async def delete(self, path: str, commit_message: str) -> None:
        path_clean = normalize_path(path)
        branch = await self.get_branch()

        async with self._create_client() as client:
            resp = await self._request(
                client,
                "DELETE",
                self._file_url(path_clean),
                json={"branch": branch, "commit_message": commit_message},
            )
            if resp.status_code == 404:
                raise NotFoundError(f"File not found: {path_clean}")

            self._raise_for_status(resp, context="delete")

    async def blame(self, path: str) -> List[Dict[str, Any]]:
        """Return blame ranges for `path`, in line order."""
        path_clean = normalize_path(path)
        branch = await self.get_branch()

        async with self._create_client() as client:
            resp = await self._request(client, "GET", self._file_url(path_clean, "blame"), params={"ref": branch})
            if resp.status_code == 404:
                raise NotFoundError(f"File not found: {path_clean}")

            self._raise_for_status(resp, context="blame")
            return list(resp.json() or [])

    # --- Repository tree ---

    async def tree(self, path: Optional[str] = None, recursive: bool = False) -> AsyncIterator[List[Dict[str, Any]]]:
        """Yield tree pages under `path`.

        The next page is requested only when the consumer asks for it, so
        stopping early costs no further requests.
        """
        path_clean = normalize_tree_path(path)
        branch = await self.get_branch()

        params: Dict[str, Any] = {
            "ref": branch,
            "recursive": "true" if recursive else "false",
            "per_page": str(self._tree_page_size),
        }
        if path_clean:
            params["path"] = path_clean

        page = "1"
        async with self._create_client() as client:
            while page:
                resp = await self._request(
                    client,
                    "GET",
                    f"/projects/{self._project_path()}/repository/tree",
                    params={**params, "page": page},
                )
                if resp.status_code == 404:
                    raise NotFoundError(f"Tree not found: {path_clean or '/'}")

                self._raise_for_status(resp, context="tree")
                yield list(resp.json() or [])

                # GitLab leaves X-Next-Page empty on the last page
                page = (resp.headers.get("X-Next-Page") or "").strip()

    # --- HTTP helpers ---

    def _build_headers(self, token: Optional[str]) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.USER_AGENT,
        }
        # Fall back to GITLAB_TOKEN so anonymous setups keep working
        token_clean = (token if token is not None else os.environ.get("GITLAB_TOKEN") or "").strip()
        if token_clean:
            headers["PRIVATE-TOKEN"] = token_clean
        return headers

    def _create_client(self, custom_headers: Optional[Mapping[str, str]] = None) -> httpx.AsyncClient:
        headers = {**self._headers, **dict(custom_headers or {})}
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    def _project_path(self) -> str:
        return encode_segment(self._project_id)

    def _file_url(self, path: str, suffix: str = "") -> str:
        url = f"/projects/{self._project_path()}/repository/files/{encode_segment(path)}"
        return f"{url}/{suffix}" if suffix else url

    async def _commit_file(self, path: str, content_b64: str, commit_message: str, override: bool) -> Dict[str, Any]:
        path_clean = normalize_path(path)
        branch = await self.get_branch()

        payload = {
            "branch": branch,
            "content": content_b64,
            "encoding": "base64",
            "commit_message": commit_message,
        }
        # POST creates and rejects existing files; PUT updates and rejects missing ones
        method = "PUT" if override else "POST"

        async with self._create_client() as client:
            resp = await self._request(client, method, self._file_url(path_clean), json=payload)
            if resp.status_code == 404:
                raise NotFoundError(f"Project or branch not found while writing: {path_clean}")

            self._raise_for_status(resp, context=f"upload({method})")
            return dict(resp.json() or {})

    def _external(self, context: str, err: BaseException, status_code: Optional[int] = None) -> ExternalServiceError:
        return ExternalServiceError(f"GitLab request failed ({context}): {err}", status_code=status_code)

    def _raise_for_status(self, resp: httpx.Response, *, context: str) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._external(context, e, resp.status_code) from e

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        stream: bool = False,
    ) -> httpx.Response:
        """Send with pacing + concurrency + bounded retries for explicit throttling signals."""
        attempts = self._MAX_RATE_LIMIT_RETRIES + 1

        for attempt in range(attempts):
            # Spread requests over the remaining quota window
            await self._pacer.wait()

            request = client.build_request(
                method,
                url,
                params=dict(params or {}),
                json=dict(json) if json is not None else None,
            )
            logger.debug("%s %s", method, request.url)

            try:
                # Limit concurrent requests across tasks
                async with self._sem:
                    resp = await client.send(request, stream=stream)
            except httpx.HTTPError as e:
                raise self._external(f"{method} {url}", e) from e

            self._pacer.observe(resp.headers)

            if attempt < attempts - 1:
                # If server indicates throttling, sleep via RateLimiter then retry
                should_retry = await self._rate_limiter.maybe_sleep_and_retry(resp)
                if should_retry:
                    await resp.aclose()
                    continue

            return resp

        raise RuntimeError("Unreachable: _request did not return a response")
