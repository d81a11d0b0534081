"""
Unit tests for artifact storage.
"""
from __future__ import annotations

import os

import pytest

from packages.shared import storage


@pytest.fixture
def artifacts_dir(tmp_path, monkeypatch):
    root = tmp_path / "artifacts"
    monkeypatch.setattr(storage, "ARTIFACTS_DIR", root)
    return root


def _fail_replace(src, dst):
    raise OSError("disk full")


class TestSaveArtifact:
    def test_saves_under_record_dir(self, artifacts_dir):
        path = storage.save_artifact("rec-1", "Reyes_Dental_Chart.pdf", b"%PDF-1.4 test")
        assert path == artifacts_dir / "rec-1" / "Reyes_Dental_Chart.pdf"
        assert path.read_bytes() == b"%PDF-1.4 test"

    def test_local_dir_without_record(self, artifacts_dir):
        path = storage.save_artifact(None, "chart.pdf", b"x")
        assert path.parent == artifacts_dir / "local"

    def test_overwrite_replaces_content(self, artifacts_dir):
        storage.save_artifact("rec-1", "chart.pdf", b"old")
        path = storage.save_artifact("rec-1", "chart.pdf", b"new")
        assert path.read_bytes() == b"new"
        assert sorted(p.name for p in path.parent.iterdir()) == ["chart.pdf"]

    def test_failed_write_leaves_nothing(self, artifacts_dir, monkeypatch):
        monkeypatch.setattr(storage.os, "replace", _fail_replace)
        with pytest.raises(OSError):
            storage.save_artifact("rec-2", "chart.pdf", b"data")
        assert list((artifacts_dir / "rec-2").iterdir()) == []

    def test_failed_write_keeps_previous_file(self, artifacts_dir, monkeypatch):
        path = storage.save_artifact("rec-3", "chart.pdf", b"v1")
        monkeypatch.setattr(storage.os, "replace", _fail_replace)
        with pytest.raises(OSError):
            storage.save_artifact("rec-3", "chart.pdf", b"v2")
        assert path.read_bytes() == b"v1"


class TestHelpers:
    def test_sha256(self):
        assert storage.sha256_bytes(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_artifact_path(self, artifacts_dir):
        assert storage.get_artifact_path("r", "a.pdf") == artifacts_dir / "r" / "a.pdf"

    def test_write_atomic_creates_parents(self, tmp_path):
        target = tmp_path / "nested" / "out" / "chart.pdf"
        storage.write_atomic(target, b"abc")
        assert target.read_bytes() == b"abc"
        assert os.listdir(target.parent) == ["chart.pdf"]
