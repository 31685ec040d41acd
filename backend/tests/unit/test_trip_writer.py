from __future__ import annotations

import threading

import pytest

import drivescore.services.trip_writer as trip_writer_module
from drivescore.services.drive_session import score_segment
from drivescore.services.motion import LocationSample
from drivescore.services.trip_aggregator import summarize_samples
from drivescore.services.trip_writer import TripWriter


class FakeSession:
    def __init__(self):
        self.committed = False
        self.rolled_back = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True


class FakeTrip:
    def __init__(self, trip_id: int):
        self.id = trip_id


def _finished_trip():
    samples = [
        LocationSample(latitude=50.0 + i * 0.001, longitude=19.0, speed_kmh=30.0, timestamp_ms=i * 1_000)
        for i in range(3)
    ]
    return score_segment(summarize_samples(samples))


def test_submit_resolves_to_trip_id_and_commits(monkeypatch):
    sessions: list[FakeSession] = []
    recorded = []

    def factory():
        session = FakeSession()
        sessions.append(session)
        return session

    monkeypatch.setattr(trip_writer_module, "add_trip", lambda db, uid, finished: FakeTrip(41))
    monkeypatch.setattr(trip_writer_module, "record_trip", lambda db, trip: recorded.append(trip.id))

    writer = TripWriter(factory, max_workers=1)
    try:
        future = writer.submit("u-1", _finished_trip())
        assert future.result(timeout=5) == 41
    finally:
        writer.shutdown()

    assert recorded == [41]
    assert sessions[0].committed is True
    assert writer.pending_count == 0


def test_failed_write_is_observable_and_rolled_back(monkeypatch):
    sessions: list[FakeSession] = []

    def factory():
        session = FakeSession()
        sessions.append(session)
        return session

    def boom(db, uid, finished):
        raise RuntimeError("database down")

    monkeypatch.setattr(trip_writer_module, "add_trip", boom)

    writer = TripWriter(factory, max_workers=1)
    try:
        future = writer.submit("u-1", _finished_trip())
        with pytest.raises(RuntimeError, match="database down"):
            future.result(timeout=5)
    finally:
        writer.shutdown()

    assert sessions[0].rolled_back is True
    assert sessions[0].committed is False


def test_submit_does_not_block_and_wait_drains(monkeypatch):
    release = threading.Event()

    def slow_add(db, uid, finished):
        release.wait(timeout=5)
        return FakeTrip(7)

    monkeypatch.setattr(trip_writer_module, "add_trip", slow_add)
    monkeypatch.setattr(trip_writer_module, "record_trip", lambda db, trip: None)

    writer = TripWriter(FakeSession, max_workers=1)
    try:
        future = writer.submit("u-1", _finished_trip())
        assert not future.done()
        assert writer.wait(timeout=0.05) is False

        release.set()
        assert writer.wait(timeout=5) is True
        assert future.result() == 7
    finally:
        writer.shutdown()
