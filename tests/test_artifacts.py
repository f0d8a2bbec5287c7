from datetime import datetime, timezone

import pytest

from md_render.artifacts import ArtifactWriter, environment_fingerprint
from md_render.errors import ArtifactWriteFailure
from md_render.models import ArtifactSet, ErrorRecord, Stage, UrlSource


def test_artifact_set_is_rooted_in_output_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    artifacts = ArtifactSet.for_directory("out")

    assert artifacts.output_dir == tmp_path.resolve() / "out"
    assert [p.name for p in artifacts.all_paths()] == [
        "rendered.html", "rendered.png", "rendered.pdf", "error.txt", "README_render_failed.txt",
    ]
    assert all(p.parent == artifacts.output_dir for p in artifacts.all_paths())


def test_ensure_dir_is_recursive_and_idempotent(tmp_path, log) -> None:
    writer = ArtifactWriter(ArtifactSet.for_directory(tmp_path / "a" / "b"), log)

    writer.ensure_dir()
    writer.ensure_dir()

    assert (tmp_path / "a" / "b").is_dir()


def test_write_overwrites_text_and_bytes(tmp_path, log) -> None:
    artifacts = ArtifactSet.for_directory(tmp_path)
    writer = ArtifactWriter(artifacts, log)

    writer.write(artifacts.html_path, "first")
    writer.write(artifacts.html_path, "zweite Fassung é")
    writer.write(artifacts.png_path, b"\x89PNG")

    assert artifacts.html_path.read_text(encoding="utf-8") == "zweite Fassung é"
    assert artifacts.png_path.read_bytes() == b"\x89PNG"


def test_write_into_missing_directory_fails(tmp_path, log) -> None:
    artifacts = ArtifactSet.for_directory(tmp_path / "never-created")
    writer = ArtifactWriter(artifacts, log)

    with pytest.raises(ArtifactWriteFailure, match="Cannot write"):
        writer.write(artifacts.html_path, "<html></html>")


def test_fallback_points_to_error_report(tmp_path, log) -> None:
    artifacts = ArtifactSet.for_directory(tmp_path)
    ArtifactWriter(artifacts, log).write_fallback("browser crashed")

    text = artifacts.fallback_path.read_text(encoding="utf-8")
    assert text.startswith("Render failed. See error.txt for details.")
    assert "browser crashed" in text


def test_error_report_contents(tmp_path, log) -> None:
    artifacts = ArtifactSet.for_directory(tmp_path)
    record = ErrorRecord(
        stage=Stage.RENDER,
        message="Timed out after 60000ms",
        timestamp=datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc),
        source=UrlSource("https://example.com/doc.md"),
        stack="Traceback (most recent call last):\n  ...\nRenderFailure: Timed out after 60000ms",
    )

    ArtifactWriter(artifacts, log).write_error_report(record, {"python": "3.12.1"})

    report = artifacts.error_path.read_text(encoding="utf-8")
    assert "TIME: 2025-03-01T12:30:00+00:00" in report
    assert "SOURCE (url): https://example.com/doc.md" in report
    assert "STAGE: render" in report
    assert "RenderFailure: Timed out" in report
    assert '"python": "3.12.1"' in report


def test_discard_stale_removes_only_pipeline_files(tmp_path, log) -> None:
    artifacts = ArtifactSet.for_directory(tmp_path)
    artifacts.pdf_path.write_bytes(b"old")
    artifacts.error_path.write_text("old", encoding="utf-8")
    (tmp_path / "keep.txt").write_text("mine", encoding="utf-8")

    ArtifactWriter(artifacts, log).discard_stale()

    assert sorted(p.name for p in tmp_path.iterdir()) == ["keep.txt"]


def test_remove_reports_whether_a_file_was_deleted(tmp_path, log) -> None:
    artifacts = ArtifactSet.for_directory(tmp_path)
    writer = ArtifactWriter(artifacts, log)
    artifacts.pdf_path.write_bytes(b"")

    assert writer.remove(artifacts.pdf_path) is True
    assert writer.remove(artifacts.pdf_path) is False
    assert not artifacts.pdf_path.exists()


def test_environment_fingerprint_lists_packages() -> None:
    fingerprint = environment_fingerprint()

    assert fingerprint["python"]
    assert set(fingerprint["packages"]) == {"playwright", "markdown", "httpx", "colorama", "tqdm"}
