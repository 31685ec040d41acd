from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable

from sqlalchemy.orm import Session

from drivescore.services.drive_session import FinishedTrip
from drivescore.services.trip_store import add_trip
from drivescore.services.user_stats import record_trip

logger = logging.getLogger(__name__)


class TripWriter:
    """Persist finished trips off the sample-processing path.

    ``submit`` returns immediately with a future that resolves to the new trip
    id, or carries the exception if the write failed. Failed writes are logged
    and dropped; there is no retry.
    """

    def __init__(self, session_factory: Callable[[], Session], max_workers: int = 4):
        self._session_factory = session_factory
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="trip-writer")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def _write(self, uid: str, finished: FinishedTrip) -> int:
        with self._session_factory() as db:
            try:
                trip = add_trip(db, uid, finished)
                record_trip(db, trip)
                db.commit()
            except Exception:
                db.rollback()
                raise
            return trip.id

    def _on_done(self, uid: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Trip write failed; trip dropped",
                extra={"uid": uid, "error": repr(exc)},
            )
        else:
            logger.info("Trip persisted", extra={"uid": uid, "trip_id": future.result()})

    def submit(self, uid: str, finished: FinishedTrip) -> Future:
        future = self._executor.submit(self._write, uid, finished)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(lambda f: self._on_done(uid, f))
        return future

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every write submitted so far completed."""
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        # In-flight writes are allowed to finish so no finished trip is lost.
        self._executor.shutdown(wait=True)
