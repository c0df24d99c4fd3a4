"""Tests for the real-time scheduler loop."""

import time

import pytest

from asset_twin import RealtimeScheduler


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class ExplodingEngine:
    """Engine stand-in whose cycles always fail."""

    def __init__(self):
        self.calls = 0

    def run_cycle(self):
        self.calls += 1
        raise RuntimeError("store offline")


@pytest.fixture
def scheduler(engine):
    sched = RealtimeScheduler(engine, interval_sec=60)
    yield sched
    sched.stop()
    sched.join(timeout=5)


class TestLifecycle:
    """Tests for start/stop semantics."""

    def test_start_runs_first_pass_immediately(self, scheduler):
        scheduler.start()

        assert scheduler.is_running
        assert scheduler.cycles == 1

    def test_second_start_is_noop(self, scheduler):
        scheduler.start()
        scheduler.start()

        assert scheduler.cycles == 1

    def test_stop_when_not_running(self, scheduler):
        scheduler.stop()
        scheduler.stop()

        assert not scheduler.is_running

    def test_stop_ends_loop(self, engine):
        scheduler = RealtimeScheduler(engine, interval_sec=0.01)
        scheduler.start()
        assert _wait_for(lambda: scheduler.cycles >= 3)

        scheduler.stop()
        scheduler.join(timeout=5)
        settled = scheduler.cycles
        time.sleep(0.05)

        assert not scheduler.is_running
        assert scheduler.cycles == settled

    def test_restart_after_stop(self, engine):
        scheduler = RealtimeScheduler(engine, interval_sec=60)
        scheduler.start()
        scheduler.stop()
        scheduler.join(timeout=5)

        scheduler.start()
        try:
            assert scheduler.is_running
            assert scheduler.cycles == 2
        finally:
            scheduler.stop()
            scheduler.join(timeout=5)

    def test_interval_defaults_to_config(self, engine):
        assert RealtimeScheduler(engine).interval_sec == engine.config.engine.interval_sec


class TestFailures:
    """Tests that a failing cycle does not kill the loop."""

    def test_errors_are_logged_and_loop_continues(self, caplog):
        broken = ExplodingEngine()
        scheduler = RealtimeScheduler(broken, interval_sec=0.01)

        scheduler.start()
        try:
            assert _wait_for(lambda: broken.calls >= 3)
        finally:
            scheduler.stop()
            scheduler.join(timeout=5)

        assert scheduler.cycles == 0
        assert "Error in real-time processing" in caplog.text


def test_cycles_advance_engine_state(engine, machine_payload):
    machine = engine.create_machine(machine_payload(initial_life=80))
    scheduler = RealtimeScheduler(engine, interval_sec=0.01)

    scheduler.start()
    try:
        assert _wait_for(lambda: scheduler.cycles >= 2)
    finally:
        scheduler.stop()
        scheduler.join(timeout=5)

    assert engine.get_machine(machine.id).remaining_life < 80
