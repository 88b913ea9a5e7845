import io

import pytest

from sync_monitor.services import sync_status
from sync_monitor.services.sync_status import SyncStatus, classify_status_line


@pytest.mark.parametrize(
    "line,label,color",
    [
        ("sync disabled", "Disabled", "red"),
        ("sync error", "Error", "red"),
        ("sync completed", "Completed", "green"),
        ("sync enabled", "Enabled", "green"),
        ("sync running", "Running", "blue"),
        ("  SYNC Running  ", "Running", "blue"),
        ("something else", "Initializing", "yellow"),
        ("", "Initializing", "yellow"),
    ],
)
def test_classify_status_line(line, label, color):
    status = classify_status_line(line)
    assert (status.label, status.color) == (label, color)
    assert status.error is None


def test_text_after_colon_is_ignored():
    status = classify_status_line("sync completed: 2024-01-01T00:00:00")
    assert status == SyncStatus(label="Completed", color="green")


def test_detail_after_colon_cannot_change_class():
    assert classify_status_line("sync running: last sync error cleared").label == "Running"
    assert classify_status_line("starting: sync error").label == "Initializing"


def test_badge_hidden_only_when_disabled():
    assert classify_status_line("sync disabled").show_badge is False
    assert classify_status_line("sync error").show_badge is True


def test_missing_status_file(status_reader):
    assert status_reader.get_status() == SyncStatus(label="Initializing", color="yellow")


def test_status_file_first_line_only(roots, status_reader):
    roots.status_file.write_text("sync completed: 2024-01-01T00:00:00\nsync error\n")
    status = status_reader.get_status()
    assert (status.label, status.color) == ("Completed", "green")


def test_empty_status_file(roots, status_reader):
    roots.status_file.write_text("")
    assert status_reader.get_status().label == "Initializing"


def test_oversized_status_file_is_corrupt(roots, status_reader):
    roots.status_file.write_text("sync completed\n" + "x" * 5000)
    status = status_reader.get_status()
    assert (status.label, status.color) == ("Error", "red")
    assert status.error == "Invalid status file"


def test_status_of_exactly_4096_bytes_is_parsed(roots, status_reader):
    content = "sync enabled\n"
    roots.status_file.write_text(content + "x" * (4096 - len(content)))
    assert status_reader.get_status().label == "Enabled"


def test_status_directory_counts_as_missing(roots, status_reader):
    roots.status_file.mkdir()
    assert status_reader.get_status().label == "Initializing"


def test_status_is_cached_until_cleared(roots, status_reader):
    roots.status_file.write_text("sync running\n")
    assert status_reader.get_status().label == "Running"

    roots.status_file.write_text("sync completed\n")
    assert status_reader.get_status().label == "Running"

    status_reader.clear_cache()
    assert status_reader.get_status().label == "Completed"


def test_status_file_that_cannot_be_opened(roots, status_reader, monkeypatch):
    roots.status_file.write_text("sync completed\n")

    def refuse(*args, **kwargs):
        raise OSError("too many open files")

    monkeypatch.setattr(sync_status, "open", refuse, raising=False)
    status = status_reader.get_status()
    assert (status.label, status.color) == ("Error", "red")
    assert status.error == "Unable to read status"


def test_status_file_read_failure(roots, status_reader, monkeypatch):
    roots.status_file.write_text("sync completed\n")

    class BrokenFile(io.StringIO):
        def readline(self, *args):
            raise OSError("I/O error")

    monkeypatch.setattr(sync_status, "open", lambda *a, **k: BrokenFile(), raising=False)
    status = status_reader.get_status()
    assert (status.label, status.color) == ("Error", "red")
    assert status.error == "Status read error"
