"""Filesystem layout, unique naming and retention of split outputs."""

import asyncio
import time
import uuid
from pathlib import Path

import structlog

from paritysplit.config import settings

logger = structlog.get_logger()


def new_stamp() -> str:
    """
    Build a unique per-request filename prefix.

    Millisecond timestamp followed by a random token, so two requests in the
    same millisecond still get distinct names.
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def ensure_directories(*dirs: Path) -> None:
    """Create the transient upload and public output directories."""
    for directory in dirs:
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Directory ready", path=str(directory))


class OutputJanitor:
    """
    Periodically removes stale files from the service directories.

    Split outputs are never claimed explicitly, so anything older than the
    retention window is deleted. Leftover uploads from crashed requests are
    swept the same way.
    """

    def __init__(
        self,
        directories: list[Path],
        retention_seconds: int = settings.output_retention_seconds,
        interval_seconds: int = settings.sweep_interval_seconds,
    ) -> None:
        """
        Initialize janitor.

        Args:
            directories: Directories whose files are subject to retention
            retention_seconds: Max file age before deletion, 0 disables sweeping
            interval_seconds: Delay between sweeps
        """
        self._directories = directories
        self._retention = retention_seconds
        self._interval = interval_seconds

    @property
    def enabled(self) -> bool:
        return self._retention > 0

    def sweep(self, now: float | None = None) -> list[Path]:
        """
        Delete files older than the retention window.

        Args:
            now: Reference time in epoch seconds, defaults to current time

        Returns:
            Paths that were removed
        """
        if not self.enabled:
            return []

        cutoff = (now if now is not None else time.time()) - self._retention
        removed: list[Path] = []

        for directory in self._directories:
            if not directory.is_dir():
                continue
            for path in directory.iterdir():
                try:
                    if path.is_file() and path.stat().st_mtime < cutoff:
                        path.unlink()
                        removed.append(path)
                except FileNotFoundError:
                    # Removed concurrently, e.g. by the splitter's own cleanup
                    continue
                except OSError as e:
                    logger.error(
                        "Failed to remove stale file",
                        path=str(path),
                        error=str(e),
                    )

        if removed:
            logger.info("Retention sweep complete", removed=len(removed))
        return removed

    async def run(self) -> None:
        """Sweep forever until cancelled."""
        if not self.enabled:
            logger.info("Retention sweep disabled")
            return

        logger.info(
            "Retention sweep started",
            retention_seconds=self._retention,
            interval_seconds=self._interval,
        )
        while True:
            try:
                await asyncio.to_thread(self.sweep)
            except Exception:
                logger.exception("Retention sweep failed")
            await asyncio.sleep(self._interval)
