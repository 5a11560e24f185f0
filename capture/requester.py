"""Asynchronous request/response worker for slow I/O."""

from __future__ import annotations

import queue
import threading
import time
from typing import Callable, Generic, List, Optional, TypeVar

from exceptions import RequesterClosedError, WorkerShutdownError
from log_config.logger import get_logger

logger = get_logger(__name__)

Request = TypeVar("Request")
Response = TypeVar("Response")


class AsyncRequester(Generic[Request, Response]):
    """Runs ``work(request)`` on a worker thread, off the control loop.

    :meth:`submit` enqueues without blocking; :meth:`drain_responses`
    returns every response completed since the last call, in completion
    order, without blocking. Responses are not correlated with requests;
    callers that need correlation carry an identifier in the payloads.

    The worker polls the request channel without blocking and backs off for
    ``idle_sleep_s`` when it is empty. A request whose ``work`` call raises
    is logged and yields ``None`` in its place, so N submitted requests
    always drain as N responses.
    """

    def __init__(
        self,
        work: Callable[[Request], Response],
        name: str = "requester",
        join_timeout_s: float = 2.0,
        idle_sleep_s: float = 0.001,
        autostart: bool = True,
    ) -> None:
        self._work = work
        self._name = name
        self._join_timeout_s = join_timeout_s
        self._idle_sleep_s = idle_sleep_s

        self._stop_event = threading.Event()
        self._requests: queue.Queue[Request] = queue.Queue()
        self._responses: queue.Queue[Optional[Response]] = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._closed = False

        self._completed = 0
        self._failed = 0

        if autostart:
            self.start()

    @property
    def name(self) -> str:
        return self._name

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def failed(self) -> int:
        return self._failed

    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """Start the worker thread."""
        if self._closed:
            raise RequesterClosedError(f"Requester '{self._name}' is closed")
        if self._worker is not None:
            return

        self._stop_event.clear()
        self._worker = threading.Thread(target=self._work_loop, name=self._name, daemon=True)
        self._worker.start()
        logger.debug(f"Requester '{self._name}' started")

    def submit(self, request: Request) -> None:
        """Enqueue ``request`` for the worker.

        Raises:
            RequesterClosedError: If the worker has terminated
        """
        if self._closed or not self.is_running():
            raise RequesterClosedError(f"Requester '{self._name}': worker is not running")
        self._requests.put_nowait(request)

    def drain_responses(self) -> List[Optional[Response]]:
        """Return all responses completed since the last call."""
        responses: List[Optional[Response]] = []
        while True:
            try:
                responses.append(self._responses.get_nowait())
            except queue.Empty:
                return responses

    def close(self) -> None:
        """Stop the worker and join it. Pending requests are discarded.

        Raises:
            WorkerShutdownError: If the worker is still alive after the join timeout
        """
        self._closed = True
        worker = self._worker
        if worker is None:
            return

        self._stop_event.set()
        worker.join(timeout=self._join_timeout_s)
        if worker.is_alive():
            logger.critical(
                f"Requester '{self._name}' did not stop within {self._join_timeout_s}s; "
                "a request is probably stuck in a blocking call"
            )
            raise WorkerShutdownError(
                f"Requester '{self._name}': could not terminate the worker thread",
                worker_name=self._name,
            )

        self._worker = None
        dropped = self._requests.qsize()
        if dropped:
            logger.info(f"Requester '{self._name}' stopped with {dropped} unprocessed requests")
        else:
            logger.debug(f"Requester '{self._name}' stopped")

    def __enter__(self) -> "AsyncRequester[Request, Response]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _work_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                request = self._requests.get_nowait()
            except queue.Empty:
                time.sleep(self._idle_sleep_s)
                continue

            try:
                response = self._work(request)
            except Exception as e:
                self._failed += 1
                logger.exception(
                    f"Requester '{self._name}': request failed: {e.__class__.__name__}: {e}"
                )
                self._responses.put(None)
                continue

            self._completed += 1
            self._responses.put(response)


__all__ = ["AsyncRequester"]
