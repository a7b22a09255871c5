import sys
import types
import uuid
import importlib.util
from pathlib import Path


def _find_server_py() -> Path:
    root = Path(__file__).resolve().parents[2]
    candidates = [
        root / "server.py",
        root / "server" / "server.py",
        root / "src" / "server" / "server.py",
    ]
    for p in candidates:
        if p.exists():
            return p
    raise FileNotFoundError(f"Could not find server.py. Tried: {candidates}")


def _install_fake_modules(monkeypatch, captures: dict):
    # ---- Fake mcp.server.fastmcp.FastMCP ----
    mcp_mod = types.ModuleType("mcp")
    mcp_server_mod = types.ModuleType("mcp.server")
    fastmcp_mod = types.ModuleType("mcp.server.fastmcp")

    class DummyFastMCP:
        def __init__(self, name: str):
            captures["fastmcp_name"] = name
            captures["mcp_instance"] = self
            self.run_calls = []

        def run(self, *, transport: str):
            self.run_calls.append({"transport": transport})
            captures["run_calls"] = list(self.run_calls)

    fastmcp_mod.FastMCP = DummyFastMCP

    mcp_mod.__path__ = []
    mcp_server_mod.__path__ = []

    monkeypatch.setitem(sys.modules, "mcp", mcp_mod)
    monkeypatch.setitem(sys.modules, "mcp.server", mcp_server_mod)
    monkeypatch.setitem(sys.modules, "mcp.server.fastmcp", fastmcp_mod)

    # ---- Fake config ----
    config_mod = types.ModuleType("config")
    config_mod.LOG_LEVEL = "DEBUG"
    monkeypatch.setitem(sys.modules, "config", config_mod)

    # ---- Fake sources ----
    def _ensure_pkg(name: str):
        pkg = types.ModuleType(name)
        pkg.__path__ = []
        monkeypatch.setitem(sys.modules, name, pkg)

    _ensure_pkg("sources")
    _ensure_pkg("tools")

    adapter_mod = types.ModuleType("sources.git_adapter")
    factory_mod = types.ModuleType("sources.source_factory")

    class FakeGitAdapter:
        pass

    def default_filesystem():
        captures["default_filesystem_calls"] = captures.get("default_filesystem_calls", 0) + 1
        captures["adapter_instance"] = FakeGitAdapter()
        return captures["adapter_instance"]

    adapter_mod.GitAdapter = FakeGitAdapter
    factory_mod.default_filesystem = default_filesystem

    monkeypatch.setitem(sys.modules, "sources.git_adapter", adapter_mod)
    monkeypatch.setitem(sys.modules, "sources.source_factory", factory_mod)

    # ---- Fake tools ----
    for name in ("read_file", "write_file", "delete_file", "transfer_file", "list_contents"):
        mod = types.ModuleType(f"tools.{name}")

        def register(mcp, *, adapter=None, _name=name):
            captures.setdefault("register_calls", []).append({"tool": _name, "mcp": mcp, "adapter": adapter})

        mod.register = register
        monkeypatch.setitem(sys.modules, f"tools.{name}", mod)


def _load_server_module(monkeypatch, captures: dict):
    _install_fake_modules(monkeypatch, captures)

    server_path = _find_server_py()
    mod_name = f"server_under_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, server_path)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, mod_name, module)
    spec.loader.exec_module(module)
    return module


def test_server_registers_tools_with_one_adapter(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)

    assert captures["fastmcp_name"] == "gitlab-fs"
    # Nothing is wired at import time
    assert "register_calls" not in captures

    module.register_tools()

    calls = captures["register_calls"]
    assert [c["tool"] for c in calls] == ["read_file", "write_file", "delete_file", "transfer_file", "list_contents"]
    assert captures["default_filesystem_calls"] == 1
    assert all(c["adapter"] is captures["adapter_instance"] for c in calls)
    assert all(c["mcp"] is captures["mcp_instance"] for c in calls)


def test_server_register_tools_uses_injected_adapter(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)
    injected = object()

    module.register_tools(injected)

    assert "default_filesystem_calls" not in captures
    assert all(c["adapter"] is injected for c in captures["register_calls"])


def test_server_main_runs_stdio(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)
    monkeypatch.setattr(module.logging, "basicConfig", lambda **kwargs: captures.setdefault("logging", kwargs))

    module.main()

    assert captures["run_calls"] == [{"transport": "stdio"}]
    assert captures["logging"]["stream"] is sys.stderr
    assert captures["logging"]["level"] == module.logging.DEBUG
