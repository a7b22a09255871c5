import io

import pytest

from core.errors import ExternalServiceError, NotFoundError
from core.models import FileMetadata
from sources.git_adapter import GitAdapter


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


class FakeRepositoryClient:
    """In-memory repository with the GitLab files API rules.

    - create (override=False) rejects existing files, update rejects missing ones
    - directories only exist through the files they contain
    - missing paths raise NotFoundError, also for empty tree listings
    - `fail` maps an operation name to an exception raised on every call
    - `fail_paths` maps (operation, path) to an exception for that path only
    """

    def __init__(self, files=None, *, page_size: int = 100):
        self.files = {k: (v.encode() if isinstance(v, str) else v) for k, v in (files or {}).items()}
        self.blames = {}
        self.sizes = {}
        self.page_size = page_size
        self.calls = []
        self.pages_served = 0
        self.fail = {}
        self.fail_paths = {}

    def _check(self, op, path):
        self.calls.append((op, path))
        if op in self.fail:
            raise self.fail[op]
        if (op, path) in self.fail_paths:
            raise self.fail_paths[(op, path)]

    def _require(self, path):
        if path not in self.files:
            raise NotFoundError(f"File not found: {path}")

    async def read(self, path):
        self._check("read", path)
        self._require(path)
        return FileMetadata(file_path=path, size=self.sizes.get(path, len(self.files[path])))

    async def read_raw(self, path):
        self._check("read_raw", path)
        self._require(path)
        return self.files[path]

    async def read_stream(self, path):
        self._check("read_stream", path)
        self._require(path)
        if not self.files[path]:
            return None
        return io.BytesIO(self.files[path])

    async def upload(self, path, contents, commit_message, override=False):
        self._check("upload", path)
        if override and path not in self.files:
            raise ExternalServiceError("A file with this name doesn't exist", status_code=400)
        if not override and path in self.files:
            raise ExternalServiceError("A file with this name already exists", status_code=400)
        self.files[path] = contents.encode() if isinstance(contents, str) else bytes(contents)
        self.calls.append(("commit", commit_message, override))
        return {"file_path": path, "branch": "main"}

    async def upload_stream(self, path, stream, commit_message, override=False):
        return await self.upload(path, stream.read(), commit_message, override)

    async def delete(self, path, commit_message):
        self._check("delete", path)
        self._require(path)
        del self.files[path]
        self.calls.append(("commit", commit_message, None))

    async def tree(self, path=None, recursive=False):
        self._check("tree", path)
        entries = self._entries(path, recursive)
        if not entries and (path or "").strip("/"):
            raise NotFoundError(f"Tree not found: {path}")

        for start in range(0, max(len(entries), 1), self.page_size):
            self.pages_served += 1
            yield entries[start:start + self.page_size]

    async def blame(self, path):
        self._check("blame", path)
        self._require(path)
        return self.blames.get(path, [])

    def _entries(self, path, recursive):
        base = (path or "").strip("/")
        prefix = base + "/" if base else ""
        seen = {}
        for file_path in sorted(self.files):
            if not file_path.startswith(prefix):
                continue
            parts = file_path[len(prefix):].split("/")
            if recursive:
                for i in range(1, len(parts)):
                    seen.setdefault(prefix + "/".join(parts[:i]), "tree")
                seen[file_path] = "blob"
            elif len(parts) == 1:
                seen[file_path] = "blob"
            else:
                seen.setdefault(prefix + parts[0], "tree")

        # GitLab lists trees before blobs
        ordered = sorted(seen.items(), key=lambda kv: (kv[1] != "tree", kv[0]))
        return [{"type": t, "path": p, "name": p.rsplit("/", 1)[-1], "mode": "100644"} for p, t in ordered]


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def fake_client():
    return FakeRepositoryClient(
        {
            "LICENSE": "MIT",
            "README.md": "# Testing repo for `gitlab-fs`",
            "test": "1",
            "test2": "2",
            "recursive/recursive.testing.md": "# Recursive",
            "recursive/level-1/level-2/.gitkeep": b"",
        }
    )


@pytest.fixture
def adapter(fake_client):
    return GitAdapter(fake_client)
