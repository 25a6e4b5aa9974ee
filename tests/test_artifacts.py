"""Tests for report artifact persistence."""

from pathlib import Path

import pytest

from report_poller.artifacts import ArtifactSink, FileArtifactSink, build_report_document
from report_poller.exceptions import ArtifactError


def test_document_wraps_basic_html():
    document = build_report_document("<div>basic</div>")
    assert document.startswith("<!DOCTYPE html> <html><head></head>")
    assert document.endswith("<div>basic</div></html>")


def test_base_sink_is_abstract():
    with pytest.raises(NotImplementedError):
        ArtifactSink().persist("<html/>", "dir", "file.html")


class TestFileArtifactSink:
    def test_writes_into_workspace(self, tmp_path: Path):
        sink = FileArtifactSink(tmp_path / "workspace")

        path = sink.persist("<html>report</html>", "test-report-artifacts", "test-report.html")

        assert path == tmp_path / "workspace" / "test-report-artifacts" / "test-report.html"
        assert path.read_text(encoding="utf-8") == "<html>report</html>"

    def test_overwrites_previous_report(self, tmp_path: Path):
        sink = FileArtifactSink(tmp_path)
        sink.persist("old", "reports", "r.html")
        path = sink.persist("new", "reports", "r.html")
        assert path.read_text(encoding="utf-8") == "new"

    def test_archives_copy(self, tmp_path: Path):
        sink = FileArtifactSink(tmp_path / "workspace", archive_dir=tmp_path / "archive")

        sink.persist("<html>report</html>", "reports", "r.html")

        archived = tmp_path / "archive" / "reports" / "r.html"
        assert archived.read_text(encoding="utf-8") == "<html>report</html>"

    def test_refuses_to_archive_empty_report(self, tmp_path: Path):
        sink = FileArtifactSink(tmp_path / "workspace", archive_dir=tmp_path / "archive")

        with pytest.raises(ArtifactError, match="empty"):
            sink.persist("", "reports", "r.html")

        assert not (tmp_path / "archive" / "reports" / "r.html").exists()

    def test_unicode_content(self, tmp_path: Path):
        path = FileArtifactSink(tmp_path).persist("<p>résumé ✓</p>", "reports", "r.html")
        assert path.read_text(encoding="utf-8") == "<p>résumé ✓</p>"
