from core.paths import PathPrefixer, clean_root, normalize_posix_relpath


def test_normalize_posix_relpath():
    assert normalize_posix_relpath(" /src/app.py ") == "src/app.py"
    assert normalize_posix_relpath("src\\utils\\a.py") == "src/utils/a.py"
    assert normalize_posix_relpath("././docs/x.md") == "docs/x.md"
    assert normalize_posix_relpath(".") == ""
    assert normalize_posix_relpath(None) == ""


def test_clean_root():
    for root in ("", ".", "./", "/", None):
        assert clean_root(root) == ""
    assert clean_root("./docs/") == "docs"


def test_prefixer_without_prefix():
    p = PathPrefixer("")
    assert p.prefix == ""
    assert p.prefix_path("/README.md") == "README.md"
    assert p.prefix_path("/") == ""


def test_prefixer_with_prefix():
    p = PathPrefixer("/docs/")
    assert p.prefix == "docs/"
    assert p.prefix_path("guide.md") == "docs/guide.md"
    assert p.prefix_path("/sub/a.md") == "docs/sub/a.md"
    assert p.prefix_path("") == "docs/"


def test_prefixer_strip_prefix():
    p = PathPrefixer("docs")
    assert p.strip_prefix("docs/sub/a.md") == "sub/a.md"
    assert p.strip_prefix("other/a.md") == "other/a.md"
    assert p.strip_prefix("/docs/sub/") == "sub/"
