import asyncio
import os
import time

import pytest

from paritysplit.storage import OutputJanitor, ensure_directories, new_stamp


def test_new_stamp_is_unique_under_rapid_calls():
    stamps = {new_stamp() for _ in range(1000)}

    assert len(stamps) == 1000


def test_new_stamp_starts_with_millisecond_timestamp():
    before = int(time.time() * 1000)
    millis = int(new_stamp().split("-")[0])

    assert before <= millis <= int(time.time() * 1000)


def test_ensure_directories_is_idempotent(tmp_path):
    uploads = tmp_path / "a" / "uploads"
    public = tmp_path / "public"

    ensure_directories(uploads, public)
    ensure_directories(uploads, public)

    assert uploads.is_dir()
    assert public.is_dir()


def test_sweep_removes_only_stale_files(tmp_path):
    now = time.time()
    stale = tmp_path / "1-odd-pages.pdf"
    fresh = tmp_path / "2-odd-pages.pdf"
    stale.write_bytes(b"old")
    fresh.write_bytes(b"new")
    os.utime(stale, (now - 7200, now - 7200))

    janitor = OutputJanitor([tmp_path], retention_seconds=3600, interval_seconds=60)
    removed = janitor.sweep(now=now)

    assert removed == [stale]
    assert not stale.exists()
    assert fresh.exists()


def test_sweep_skips_missing_directories(tmp_path):
    janitor = OutputJanitor([tmp_path / "missing"], retention_seconds=10)

    assert janitor.sweep() == []


def test_disabled_janitor_keeps_everything(tmp_path):
    old = tmp_path / "old.pdf"
    old.write_bytes(b"x")
    os.utime(old, (0, 0))

    janitor = OutputJanitor([tmp_path], retention_seconds=0)

    assert not janitor.enabled
    assert janitor.sweep() == []
    assert old.exists()


def test_run_sweeps_until_cancelled(tmp_path):
    stale = tmp_path / "1-even-pages.pdf"
    stale.write_bytes(b"old")
    os.utime(stale, (0, 0))
    janitor = OutputJanitor([tmp_path], retention_seconds=60, interval_seconds=3600)

    async def scenario():
        task = asyncio.create_task(janitor.run())
        for _ in range(500):
            if not stale.exists():
                break
            await asyncio.sleep(0.01)
        assert not task.done()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert not stale.exists()


def test_disabled_run_returns_immediately(tmp_path):
    janitor = OutputJanitor([tmp_path], retention_seconds=0)

    assert asyncio.run(asyncio.wait_for(janitor.run(), timeout=1)) is None
