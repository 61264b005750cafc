import hashlib
from pathlib import Path
from typing import Any

from conftest import SERVER, FakeDownloader

from argeon.core.download_engine import DownloadEngine
from argeon.core.events import EventRecorder
from argeon.exceptions import DownloadError
from argeon.models.events import ProgressEvent
from argeon.models.manifest import FileEntry
from argeon.models.stats import InstallStats


def _entries(*names: str) -> list[FileEntry]:
    return [FileEntry(filename=n, download_url=f"/files/mods/{n}") for n in names]


async def test_progress_counts_and_percentages(
    engine: DownloadEngine, recorder: EventRecorder, tmp_path: Path
) -> None:
    failed = await engine.download_batch(_entries("a.jar", "b.jar", "c.jar"), tmp_path, 0, 3)

    progress = recorder.of_type(ProgressEvent)
    assert failed == set()
    assert [(e.current, e.total, e.percentage) for e in progress] == [
        (1, 3, 33),
        (2, 3, 67),
        (3, 3, 100),
    ]
    assert [e.filename for e in progress] == ["a.jar", "b.jar", "c.jar"]
    assert all(e.type == "download" for e in progress)
    assert (tmp_path / "b.jar").read_bytes() == b"payload"


async def test_progress_continues_from_start_index(
    engine: DownloadEngine, recorder: EventRecorder, tmp_path: Path
) -> None:
    await engine.download_batch(_entries("a.jar"), tmp_path, 5, 10)
    (event,) = recorder.of_type(ProgressEvent)
    assert (event.current, event.total, event.percentage) == (6, 10, 60)


async def test_index_entries_are_skipped(
    engine: DownloadEngine,
    downloader: FakeDownloader,
    recorder: EventRecorder,
    tmp_path: Path,
) -> None:
    stats = InstallStats()
    files = _entries(".index/sodium.toml", "sodium.jar")

    failed = await engine.download_batch(files, tmp_path, 0, 1, stats=stats)

    assert failed == set()
    assert downloader.calls == [f"{SERVER}/files/mods/sodium.jar"]
    assert [(e.current, e.total) for e in recorder.of_type(ProgressEvent)] == [(1, 1)]
    assert not (tmp_path / ".index").exists()
    assert stats.index_entries_skipped == 1
    assert stats.files_downloaded == 1


async def test_failing_file_gets_exactly_three_attempts(
    engine: DownloadEngine, downloader: FakeDownloader, no_sleep: Any, tmp_path: Path
) -> None:
    bad_url = f"{SERVER}/files/mods/bad.jar"
    downloader.responses[bad_url] = DownloadError("HTTP 503")
    stats = InstallStats()

    failed = await engine.download_batch(
        _entries("bad.jar", "good.jar"), tmp_path, 0, 2, stats=stats
    )

    assert failed == {"bad.jar"}
    assert downloader.calls_for(bad_url) == 3
    assert [c.args[0] for c in no_sleep.await_args_list] == [1.0, 2.0]
    assert (tmp_path / "good.jar").exists()
    assert stats.files_failed == 1
    assert stats.files_downloaded == 1
    assert stats.attempts_made == 4


async def test_empty_download_counts_as_failure(
    engine: DownloadEngine, downloader: FakeDownloader, no_sleep: Any, tmp_path: Path
) -> None:
    url = f"{SERVER}/files/mods/empty.jar"
    downloader.responses[url] = b""

    failed = await engine.download_batch(_entries("empty.jar"), tmp_path, 0, 1)

    assert failed == {"empty.jar"}
    assert downloader.calls_for(url) == 3


async def test_recovers_on_later_attempt(
    engine: DownloadEngine, downloader: FakeDownloader, no_sleep: Any, tmp_path: Path
) -> None:
    url = f"{SERVER}/files/mods/flaky.jar"
    downloader.responses[url] = [DownloadError("timeout"), b"jar"]

    failed = await engine.download_batch(_entries("flaky.jar"), tmp_path, 0, 1)

    assert failed == set()
    assert downloader.calls_for(url) == 2
    assert (tmp_path / "flaky.jar").read_bytes() == b"jar"


async def test_nested_filenames_create_parents(
    engine: DownloadEngine, tmp_path: Path
) -> None:
    entries = [FileEntry(filename="sodium/options.json", download_url="/files/c/o.json")]
    await engine.download_batch(entries, tmp_path, 0, 1)
    assert (tmp_path / "sodium" / "options.json").is_file()


async def test_hash_mismatch_is_retried_then_failed(
    downloader: FakeDownloader, events: Any, no_sleep: Any, tmp_path: Path
) -> None:
    engine = DownloadEngine(
        downloader=downloader,
        url_for=lambda u: SERVER + u,
        events=events,
        verify_hashes=True,
    )
    good = FileEntry(
        filename="good.jar",
        download_url="/files/good.jar",
        hash=hashlib.sha1(b"payload").hexdigest(),
    )
    bad = FileEntry(
        filename="bad.jar",
        download_url="/files/bad.jar",
        hash=hashlib.sha256(b"something else").hexdigest(),
    )

    failed = await engine.download_batch([good, bad], tmp_path, 0, 2)

    assert failed == {"bad.jar"}
    assert downloader.calls_for(f"{SERVER}/files/bad.jar") == 3


async def test_download_single_reports_success(
    engine: DownloadEngine, downloader: FakeDownloader, tmp_path: Path
) -> None:
    stats = InstallStats()
    ok = await engine.download_single(
        "https://cdn.test/client.jar", tmp_path / "client.jar", "client.jar", stats=stats
    )
    assert ok is True
    assert downloader.calls == ["https://cdn.test/client.jar"]
    assert stats.total_size_downloaded == len(b"payload")


async def test_unstorable_filename_fails_only_that_file(
    engine: DownloadEngine,
    downloader: FakeDownloader,
    recorder: EventRecorder,
    tmp_path: Path,
) -> None:
    stats = InstallStats()
    files = _entries("bad\x00name.jar", "sodium.jar")

    failed = await engine.download_batch(files, tmp_path, 0, 2, stats=stats)

    assert failed == {"bad\x00name.jar"}
    assert downloader.calls == [f"{SERVER}/files/mods/sodium.jar"]
    assert [e.current for e in recorder.of_type(ProgressEvent)] == [1, 2]
    assert stats.files_failed == 1
    assert stats.files_downloaded == 1
