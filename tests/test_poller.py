"""Tests for completion polling."""

from orchestrator.poller import poll_for_completion

from .fakes import FakeClock


def test_existing_marker_is_confirmed_after_stabilizing(tmp_path):
    marker = tmp_path / "package.json"
    marker.write_text("{}")
    clock = FakeClock()

    assert poll_for_completion(marker, clock=clock, sleep=clock.sleep) is True
    assert clock.sleeps == [0.5]


def test_timeout_returns_false(tmp_path):
    clock = FakeClock()
    found = poll_for_completion(
        tmp_path / "package.json",
        max_wait_ms=10_000,
        poll_interval_ms=2_000,
        clock=clock,
        sleep=clock.sleep,
    )
    assert found is False
    assert clock.sleeps == [2.0] * 5


def test_progress_callback_cadence(tmp_path):
    clock = FakeClock()
    reported: list[int] = []
    poll_for_completion(
        tmp_path / "package.json",
        max_wait_ms=30_000,
        poll_interval_ms=2_000,
        on_progress=reported.append,
        progress_every_ms=10_000,
        clock=clock,
        sleep=clock.sleep,
    )
    assert reported == [0, 10_000, 20_000]


def test_marker_appearing_later(tmp_path):
    marker = tmp_path / "package.json"
    clock = FakeClock()

    def sleep(seconds: float) -> None:
        clock.sleep(seconds)
        if clock.now >= 6:
            marker.write_text("{}")

    assert poll_for_completion(marker, poll_interval_ms=2_000, clock=clock, sleep=sleep) is True
    assert clock.sleeps == [2.0, 2.0, 2.0, 0.5]


def test_marker_vanishing_during_stabilization_keeps_polling(tmp_path):
    marker = tmp_path / "package.json"
    marker.write_text("{}")
    clock = FakeClock()

    def sleep(seconds: float) -> None:
        clock.sleep(seconds)
        if seconds == 0.5 and marker.exists():
            marker.unlink()

    found = poll_for_completion(
        marker,
        max_wait_ms=4_000,
        poll_interval_ms=2_000,
        clock=clock,
        sleep=sleep,
    )
    assert found is False
    assert clock.sleeps[0] == 0.5


def test_injected_marker_check_overrides_filesystem(tmp_path):
    marker = tmp_path / "package.json"
    marker.write_text("{}")
    clock = FakeClock()
    checked: list = []

    def exists(path) -> bool:
        checked.append(path)
        return False

    found = poll_for_completion(
        marker,
        max_wait_ms=4_000,
        poll_interval_ms=2_000,
        clock=clock,
        sleep=clock.sleep,
        exists=exists,
    )
    assert found is False
    assert checked == [marker, marker]
