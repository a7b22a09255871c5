import pytest

from core.errors import ValidationError, WriteFailed
from tools import delete_file as delete_file_tool
from tools import transfer_file as transfer_file_tool
from tools import write_file as write_file_tool


@pytest.fixture
def tools(dummy_mcp, adapter):
    write_file_tool.register(dummy_mcp, adapter=adapter)
    delete_file_tool.register(dummy_mcp, adapter=adapter)
    transfer_file_tool.register(dummy_mcp, adapter=adapter)
    return dummy_mcp.tools


@pytest.mark.asyncio
async def test_write_and_delete_file(tools, fake_client):
    assert await tools["write_file"](path="testing.md", content="# Testing create") == "testing.md"
    assert fake_client.files["testing.md"] == b"# Testing create"

    assert await tools["delete_file"](path="testing.md") == "testing.md"
    assert "testing.md" not in fake_client.files


@pytest.mark.asyncio
async def test_write_file_requires_path(tools):
    with pytest.raises(ValidationError):
        await tools["write_file"](path="", content="x")


@pytest.mark.asyncio
async def test_write_file_failure_propagates(tools, fake_client):
    fake_client.fail["upload"] = RuntimeError("boom")

    with pytest.raises(WriteFailed):
        await tools["write_file"](path="a.md", content="x")


@pytest.mark.asyncio
async def test_create_and_delete_directory(tools, fake_client):
    assert await tools["create_directory"](path="/testing/") == "/testing/.gitkeep"
    assert "testing/.gitkeep" in fake_client.files

    await tools["delete_directory"](path="/testing")
    assert "testing/.gitkeep" not in fake_client.files


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["", "/", ".", " ./ "])
async def test_delete_directory_refuses_root(tools, path):
    with pytest.raises(ValidationError):
        await tools["delete_directory"](path=path)


@pytest.mark.asyncio
async def test_move_and_copy(tools, fake_client):
    out = await tools["copy_file"](source="README.md", destination="copy.md")
    assert out == {"source": "README.md", "destination": "copy.md"}
    assert fake_client.files["copy.md"] == fake_client.files["README.md"]

    await tools["move_file"](source="copy.md", destination="moved.md")
    assert "copy.md" not in fake_client.files
    assert fake_client.files["moved.md"] == fake_client.files["README.md"]


@pytest.mark.asyncio
async def test_move_requires_both_paths(tools):
    with pytest.raises(ValidationError):
        await tools["move_file"](source="a.md", destination=" ")

    with pytest.raises(ValidationError):
        await tools["copy_file"](source="", destination="b.md")
