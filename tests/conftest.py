"""
Shared fixtures for duplicate cleanup tests.
Creates isolated temporary directory trees with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so the 'dupefinder' package is importable without install
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def two_roots(tmp_path) -> Dict[str, Path]:
    """
    Two scan roots with one duplicate pair across them:
    - a/x.txt and b/y.txt contain "hello"
    - a/unique.txt has unique content
    """
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.mkdir()
    b.mkdir()
    x = a / "x.txt"
    y = b / "y.txt"
    x.write_bytes(b"hello")
    y.write_bytes(b"hello")
    unique = a / "unique.txt"
    unique.write_bytes(b"something else")
    return {"a": a, "b": b, "x": x, "y": y, "unique": unique}


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files:
    - 3 identical files (one in a subdirectory)
    - 2 identical files with different content
    - 2 unique files
    - 2 empty files (empty files are duplicates of each other)
    """
    files = {}

    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty1"] = temp_dir / "empty1.txt"
    files["empty1"].write_bytes(b"")
    files["empty2"] = temp_dir / "empty2.txt"
    files["empty2"].write_bytes(b"")

    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)  # Same as dup1_a/b

    return files
