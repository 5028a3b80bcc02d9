"""Unit tests for size measurement."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from mole.safety.sizing import LARGE_DELETION_THRESHOLD, is_large_deletion, measure


class TestMeasure:
    """Tests for measure."""

    def test_missing_path(self, tmp_path: Path) -> None:
        report = measure(str(tmp_path / "missing"))
        assert report.total_bytes == 0
        assert report.complete is True

    def test_single_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.bin"
        target.write_bytes(b"x" * 1234)

        assert measure(str(target)).total_bytes == 1234

    def test_directory_tree(self, cache_dir: Path) -> None:
        report = measure(str(cache_dir))
        assert report.total_bytes == 3000
        assert report.complete is True
        assert report.unreadable == 0

    def test_empty_directory(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        assert measure(str(empty)).total_bytes == 0

    def test_symlinks_not_followed(self, tmp_path: Path) -> None:
        """Linked files and directories outside the tree are not counted."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "big.bin").write_bytes(b"z" * 5000)

        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "own.bin").write_bytes(b"a" * 10)
        (tree / "dirlink").symlink_to(outside)
        (tree / "filelink").symlink_to(outside / "big.bin")

        assert measure(str(tree)).total_bytes == 10

    def test_symlink_candidate_measures_zero(self, tmp_path: Path) -> None:
        (tmp_path / "big.bin").write_bytes(b"z" * 5000)
        link = tmp_path / "link"
        link.symlink_to(tmp_path / "big.bin")

        assert measure(str(link)).total_bytes == 0

    def test_unreadable_directory_gives_partial_size(self, cache_dir: Path) -> None:
        real_scandir = os.scandir
        blocked = str(cache_dir / "sub")

        def fake_scandir(path):
            if str(path) == blocked:
                raise PermissionError(13, "Permission denied", path)
            return real_scandir(path)

        with patch("mole.safety.sizing.os.scandir", side_effect=fake_scandir):
            report = measure(str(cache_dir))

        assert report.total_bytes == 1000
        assert report.complete is False
        assert report.unreadable == 1

    def test_unstatable_path(self, tmp_path: Path) -> None:
        with patch("mole.safety.sizing.os.lstat", side_effect=PermissionError("denied")):
            report = measure(str(tmp_path))

        assert report.total_bytes == 0
        assert report.complete is False


class TestIsLargeDeletion:
    """Tests for the large-deletion threshold."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, False),
            (LARGE_DELETION_THRESHOLD - 1, False),
            (LARGE_DELETION_THRESHOLD, False),
            (LARGE_DELETION_THRESHOLD + 1, True),
        ],
    )
    def test_threshold_boundary(self, size: int, expected: bool) -> None:
        assert is_large_deletion(size) is expected

    def test_threshold_is_one_gib(self) -> None:
        assert LARGE_DELETION_THRESHOLD == 1024 * 1024 * 1024
