import pytest
from pathlib import Path


def create_project_structure(base_path: Path, files_to_create: dict):
    """
    Creates a directory structure with files.
    files_to_create = {"dir/file.go": "content", "empty_dir/": None}
    Values may be str or bytes; a key ending in "/" creates an empty directory.
    """
    for rel_path, content in files_to_create.items():
        target = base_path / rel_path
        if rel_path.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content if content is not None else f"content of {rel_path}")


@pytest.fixture
def make_project(tmp_path: Path):
    """Returns a builder that lays out files under a fresh project root."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()

    def _make(files_to_create: dict) -> Path:
        create_project_structure(project_dir, files_to_create)
        return project_dir

    return _make
