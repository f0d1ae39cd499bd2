"""Completion polling for out-of-process scaffold tools."""

import logging
import time
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def poll_for_completion(
    marker_path: Path | str,
    max_wait_ms: int = 180_000,
    poll_interval_ms: int = 2_000,
    on_progress: ProgressCallback | None = None,
    progress_every_ms: int = 10_000,
    stabilize_ms: int = 500,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    exists: Callable[[Path], bool] = Path.exists,
) -> bool:
    """Wait until a completion marker exists.

    When the marker shows up, waits ``stabilize_ms`` more and checks again
    so a file that is still being written is not reported early.

    Args:
        marker_path: File whose existence signals completion
        max_wait_ms: Give up after this long
        poll_interval_ms: Sleep between checks
        on_progress: Called with elapsed ms roughly every ``progress_every_ms``
        progress_every_ms: Progress callback cadence
        stabilize_ms: Extra wait before confirming the marker
        clock: Monotonic clock in seconds (injectable for tests)
        sleep: Sleep function in seconds (injectable for tests)
        exists: Marker check (e.g. an artifact writer's ``marker_exists``)

    Returns:
        True if the marker was found, False on timeout
    """
    marker = Path(marker_path)
    start = clock()

    def elapsed_ms() -> int:
        return int((clock() - start) * 1000)

    while elapsed_ms() < max_wait_ms:
        if exists(marker):
            sleep(stabilize_ms / 1000)
            if exists(marker):
                logger.info(f"Completion marker found after {elapsed_ms()}ms: {marker}")
                return True

        if on_progress is not None:
            elapsed = elapsed_ms()
            if elapsed % progress_every_ms < poll_interval_ms:
                on_progress(elapsed)

        sleep(poll_interval_ms / 1000)

    logger.warning(f"Timed out after {max_wait_ms}ms waiting for {marker}")
    return False
