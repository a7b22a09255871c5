from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx

from core.errors import NotFoundError

RequestFn = Callable[..., Awaitable[httpx.Response]]


async def fetch_default_branch(
    request: RequestFn,
    client: httpx.AsyncClient,
    *,
    project: str,
) -> str:
    # Projects endpoint reports the default branch; empty repositories have none
    resp = await request(client, "GET", f"/projects/{project}")
    if resp.status_code == 404:
        raise NotFoundError(f"Project not found: {project}")
    resp.raise_for_status()

    data: Any = resp.json() or {}
    branch = str(data.get("default_branch") or "").strip()
    if not branch:
        raise NotFoundError(f"Project has no default branch: {project}")
    return branch
