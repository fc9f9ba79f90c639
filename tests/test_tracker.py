"""Tests for console reporting of upload results."""

from rich.console import Console

from src.models.upload import DeleteResult, ErrorData, SuccessData, UploadResult
from src.progress.tracker import ProgressTracker


def _tracker():
    return ProgressTracker(Console(record=True, width=120))


def test_record_success_prints_link_and_delete_hash():
    tracker = _tracker()
    data = SuccessData(id="abc", link="https://i.imgur.com/abc.png", deletehash="del123", datetime=0)

    tracker.record_result("cat.png", UploadResult(data=data, success=True, status=200, http_status=200))

    output = tracker.console.export_text()
    assert tracker.uploaded == 1
    assert "https://i.imgur.com/abc.png" in output
    assert "del123" in output


def test_record_error_counts_failure():
    tracker = _tracker()
    data = ErrorData(error="bad image", request="/3/image", method="POST")

    tracker.record_result("cat.png", UploadResult(data=data, success=False, status=400, http_status=400))

    output = tracker.console.export_text()
    assert tracker.failed == 1
    assert "bad image" in output
    assert "POST /3/image" in output


def test_display_delete_result():
    tracker = _tracker()

    tracker.display_delete_result("del123", DeleteResult(success=True, status=200, http_status=200))

    assert "Deleted image del123" in tracker.console.export_text()


def test_upload_progress_context_updates_task():
    tracker = _tracker()

    with tracker.track_upload("cat.png") as progress:
        progress.update(50, 100)
        task = progress.progress.tasks[0]
        assert task.completed == 50
        assert task.total == 100


def test_display_info_and_warning_lines():
    tracker = _tracker()

    tracker.display_info("Uploading 3 image(s) to https://api.imgur.com/3/image")
    tracker.display_warning("Upload interrupted by user.")

    output = tracker.console.export_text()
    assert "Info: Uploading 3 image(s) to https://api.imgur.com/3/image" in output
    assert "Warning: Upload interrupted by user." in output
