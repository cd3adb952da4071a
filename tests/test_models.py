"""Tests for youload models."""
from pathlib import Path

import pytest

from youload.models import (
    BatchProgress,
    BatchSummary,
    ItemResult,
    ItemStatus,
    ProbeResult,
    SubmissionResult,
    UploadItem,
    Visibility,
)


class TestUploadItem:
    def test_defaults(self):
        item = UploadItem(id="abc", file_path=Path("clip.mp4"), title="clip")
        assert item.status == ItemStatus.PENDING
        assert item.visibility == Visibility.PUBLIC
        assert item.is_short_form is False
        assert item.duration_seconds == 0
        assert item.is_vertical is False
        assert item.progress_percent == 0
        assert item.filename == "clip.mp4"

    def test_tags_parsed_from_raw(self):
        item = UploadItem(id="abc", file_path=Path("clip.mp4"), title="clip", tags_raw=" cats, funny ,, ")
        assert item.tags == ["cats", "funny"]

    def test_has_title_ignores_whitespace(self):
        assert UploadItem(id="a", file_path=Path("a.mp4"), title="  ").has_title is False
        assert UploadItem(id="a", file_path=Path("a.mp4"), title="x").has_title is True

    def test_immutable(self):
        item = UploadItem(id="abc", file_path=Path("clip.mp4"), title="clip")
        with pytest.raises(Exception):
            item.title = "other"

    def test_terminal_states(self):
        assert ItemStatus.COMPLETED.is_terminal is True
        assert ItemStatus.ERROR.is_terminal is True
        assert ItemStatus.PENDING.is_terminal is False
        assert ItemStatus.UPLOADING.is_terminal is False


class TestProbeResult:
    def test_portrait_is_vertical(self):
        assert ProbeResult(duration_seconds=10, width=1080, height=1920).is_vertical is True

    def test_landscape_and_square_are_not_vertical(self):
        assert ProbeResult(duration_seconds=10, width=1920, height=1080).is_vertical is False
        assert ProbeResult(duration_seconds=10, width=1080, height=1080).is_vertical is False


class TestBatchProgress:
    def test_overall_percent(self):
        assert BatchProgress(total_items=3, completed_items=1).overall_percent == pytest.approx(100 / 3)
        assert BatchProgress(total_items=4, completed_items=4).overall_percent == 100

    def test_empty_batch_is_zero(self):
        assert BatchProgress().overall_percent == 0


class TestBatchSummary:
    def test_counts(self):
        results = [
            ItemResult("1", "a.mp4", ItemStatus.COMPLETED, remote_id="v1"),
            ItemResult("2", "b.mp4", ItemStatus.ERROR, error="boom"),
        ]
        summary = BatchSummary(succeeded_count=1, total_count=2, results=results)
        assert summary.failed_count == 1
        assert summary.all_success is False
        assert results[0].success is True
        assert results[1].success is False

    def test_from_item(self):
        item = UploadItem(
            id="abc",
            file_path=Path("clip.mp4"),
            title="clip",
            status=ItemStatus.COMPLETED,
            remote_id="yt-1",
            remote_title="clip",
        )
        result = ItemResult.from_item(item)
        assert result.item_id == "abc"
        assert result.filename == "clip.mp4"
        assert result.remote_id == "yt-1"
        assert result.success is True


class TestWatchUrl:
    def test_submission_result_links(self):
        result = SubmissionResult(remote_id="dQw4w9WgXcQ", remote_title="clip")
        assert result.watch_url == "https://youtube.com/watch?v=dQw4w9WgXcQ"
        assert result.thumbnail_url == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"

    def test_item_result_link(self):
        assert ItemResult("1", "a.mp4", ItemStatus.COMPLETED, remote_id="v1").watch_url == (
            "https://youtube.com/watch?v=v1"
        )

    def test_failed_item_has_no_link(self):
        assert ItemResult("2", "b.mp4", ItemStatus.ERROR, error="boom").watch_url is None
