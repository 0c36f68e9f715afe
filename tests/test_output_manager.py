"""Tests for saving results to disk

Run with pytest from project root:
    pytest tests/test_output_manager.py -v
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from managers.output_manager import OutputManager, auto_generate_filename


@pytest.fixture
def manager(tmp_path):
    return OutputManager(tmp_path / "images", tmp_path / "meshes")


class TestAutoGenerateFilename:
    """Tests for timestamped filenames"""

    def test_format(self):
        now = datetime(2025, 1, 31, 12, 30, 45, 123456, tzinfo=timezone.utc)
        assert auto_generate_filename("generated", "png", now=now) == "generated-2025-01-31T12-30-45-123Z.png"

    def test_converts_to_utc(self):
        now = datetime(2025, 1, 31, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert auto_generate_filename("model", "glb", now=now) == "model-2025-01-31T12-00-00-000Z.glb"

    def test_default_now(self):
        name = auto_generate_filename("upscaled-fast", "webp")
        assert re.fullmatch(r"upscaled-fast-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.webp", name)


class TestSave:
    """Tests for OutputManager.save"""

    def test_auto_path(self, manager, tmp_path):
        saved = manager.save(b"data", prefix="erased", ext="jpeg")
        assert saved.is_absolute()
        assert saved.parent == (tmp_path / "images").resolve()
        assert saved.name.startswith("erased-")
        assert saved.suffix == ".jpeg"
        assert saved.read_bytes() == b"data"

    def test_three_d_directory(self, manager, tmp_path):
        saved = manager.save(b"glb", prefix="model", ext="glb", three_d=True)
        assert saved.parent == (tmp_path / "meshes").resolve()

    def test_explicit_path_creates_parents(self, manager, tmp_path):
        target = tmp_path / "nested" / "deeper" / "out.png"
        saved = manager.save(b"abc", save_path=str(target))
        assert saved == target.resolve()
        assert target.read_bytes() == b"abc"

    def test_relative_path_resolved(self, manager, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        saved = manager.save(b"abc", save_path="relative.png")
        assert saved == (tmp_path / "relative.png").resolve()

    def test_overwrites_existing(self, manager, tmp_path):
        target = tmp_path / "out.png"
        target.write_bytes(b"old")
        manager.save(b"new", save_path=str(target))
        assert target.read_bytes() == b"new"
