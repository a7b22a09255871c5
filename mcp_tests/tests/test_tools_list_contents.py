import pytest

from core.errors import ListingFailed, ValidationError
from tools import list_contents as list_contents_tool


@pytest.fixture
def tools(dummy_mcp, adapter):
    list_contents_tool.register(dummy_mcp, adapter=adapter)
    return dummy_mcp.tools


@pytest.mark.asyncio
async def test_list_contents_tool_root(tools):
    out = await tools["list_contents"]()

    assert sorted((e["type"], e["path"]) for e in out) == [
        ("dir", "recursive"),
        ("file", "LICENSE"),
        ("file", "README.md"),
        ("file", "test"),
        ("file", "test2"),
    ]
    readme = next(e for e in out if e["path"] == "README.md")
    assert readme["mime_type"] == "text/markdown"
    assert readme["file_size"] > 0


@pytest.mark.asyncio
async def test_list_contents_tool_recursive(tools):
    out = await tools["list_contents"](path="recursive", recursive=True)

    assert sorted(e["path"] for e in out) == [
        "recursive/level-1",
        "recursive/level-1/level-2",
        "recursive/level-1/level-2/.gitkeep",
        "recursive/recursive.testing.md",
    ]


@pytest.mark.asyncio
async def test_list_contents_tool_missing(tools):
    with pytest.raises(ListingFailed):
        await tools["list_contents"](path="nope")


@pytest.mark.asyncio
async def test_file_metadata_tool(tools, fake_client):
    fake_client.blames["README.md"] = [{"commit": {"committed_date": "2020-11-30T15:37:32.000+00:00"}}]

    out = await tools["file_metadata"](path="README.md")

    assert out == {
        "path": "README.md",
        "file_size": len(fake_client.files["README.md"]),
        "last_modified": 1606750652,
        "mime_type": "text/markdown",
    }


@pytest.mark.asyncio
async def test_file_metadata_tool_unknown_mime(tools):
    out = await tools["file_metadata"](path="LICENSE")

    assert out["mime_type"] is None
    assert out["last_modified"] is None


@pytest.mark.asyncio
async def test_file_metadata_tool_requires_path(tools):
    with pytest.raises(ValidationError):
        await tools["file_metadata"](path="")
