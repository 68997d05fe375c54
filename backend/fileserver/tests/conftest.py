from pathlib import Path

import pytest

SAMPLE_TREE = {
    "docs": {
        "readme.md": "# readme",
        "guide": {
            "intro.txt": "hello",
            "setup.txt": "install things",
        },
    },
    "media": {
        "clip.mp4": "not really a video",
        "poster.png": "not really an image",
    },
    "notes.txt": "top-level notes",
    "empty": {},
}


def build_tree(root: Path, spec: dict) -> None:
    """Materialise a nested dict as directories (dict values) and text files (str values)."""
    for name, value in spec.items():
        target = root / name
        if isinstance(value, dict):
            target.mkdir()
            build_tree(target, value)
        else:
            target.write_text(value)


@pytest.fixture
def make_tree(tmp_path: Path):
    """Create a directory tree under tmp_path and return its root."""

    def _factory(spec: dict | None = None) -> Path:
        root = tmp_path / "tree"
        root.mkdir()
        build_tree(root, SAMPLE_TREE if spec is None else spec)
        return root

    return _factory
