"""Background parse worker.

The worker owns one thread and talks to its caller only through messages:

- in:  ``{"type": "process-xlsx" | "process-ofx", "data": ..., "id": job_id}``
- out: ``{"type": "ready"}`` once at startup, then for each job any number of
  ``{"type": "progress", "data": {"progress", "processed", "total", "id"}}``
  followed by exactly one ``{"type": "result", "data": {"transactions", "errors", "id"}}``
  or ``{"type": "error", "data": {"error", "id"}}``.

Transactions in a result are immutable ``NormalizedRow`` objects.
"""

import logging
import queue
import threading
import uuid
from typing import Any, Callable, Optional

from fintrack.domain.errors import DomainError, ParseError, WorkerBusyError
from fintrack.parsers.normalize import normalize_rows
from fintrack.parsers.ofx import parse_ofx
from fintrack.parsers.xlsx import parse_xlsx, parse_xlsx_rows

logger = logging.getLogger(__name__)

PROCESS_XLSX = "process-xlsx"
PROCESS_OFX = "process-ofx"

_STOP = object()


class ImportWorker:
    """Runs one parse job at a time on a dedicated thread."""

    def __init__(self):
        self._inbox: queue.Queue = queue.Queue()
        self.outbox: queue.Queue = queue.Queue()
        self._busy = threading.Event()
        self._cancelled: set[str] = set()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ImportWorker":
        """Start the worker thread. Posts a ``ready`` message when running."""
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name="fintrack-import-worker", daemon=True)
            self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the worker thread to exit after the current job and wait for it."""
        if self._thread is not None:
            self._inbox.put(_STOP)
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "ImportWorker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def busy(self) -> bool:
        return self._busy.is_set()

    def submit(self, message: dict[str, Any]) -> str:
        """Submit a job message and return its id.

        Raises:
            WorkerBusyError: If a job is already running; callers serialize jobs
        """
        with self._lock:
            if self._busy.is_set():
                raise WorkerBusyError("Import worker is already processing a job")
            self._busy.set()
        job_id = str(message.get("id") or uuid.uuid4())
        self._inbox.put({**message, "id": job_id})
        return job_id

    def cancel(self, job_id: str) -> None:
        """Discard the result of ``job_id`` when it arrives.

        The job itself runs to completion.
        """
        with self._lock:
            self._cancelled.add(job_id)

    def get_message(self, timeout: Optional[float] = None) -> dict[str, Any]:
        """Block until the next outgoing message is available."""
        return self.outbox.get(timeout=timeout)

    def _post(self, message_type: str, data: Optional[dict[str, Any]] = None) -> None:
        message: dict[str, Any] = {"type": message_type}
        if data is not None:
            message["data"] = data
        self.outbox.put_nowait(message)

    def _run(self) -> None:
        self._post("ready", {"message": "Import worker ready"})
        while True:
            message = self._inbox.get()
            if message is _STOP:
                break
            try:
                self._handle(message)
            except Exception as e:
                # Unexpected failures still end the job with an error message
                logger.exception("Import job %s crashed", message.get("id"))
                self._busy.clear()
                self._post("error", {"error": str(e), "id": message.get("id")})

    def _handle(self, message: dict[str, Any]) -> None:
        job_id = message["id"]

        def report(processed: int, total: int) -> None:
            percent = (processed / total) * 100 if total else 100.0
            self._post(
                "progress",
                {"progress": percent, "processed": processed, "total": total, "id": job_id},
            )

        try:
            rows = self._parse(message.get("type"), message.get("data") or {}, report)
            transactions, errors = normalize_rows(rows)
        except (DomainError, KeyError, TypeError) as e:
            logger.warning("Import job %s failed: %s", job_id, e)
            self._busy.clear()
            if not self._take_cancelled(job_id):
                self._post("error", {"error": str(e), "id": job_id})
            return

        self._busy.clear()
        if self._take_cancelled(job_id):
            logger.debug("Import job %s cancelled; result discarded", job_id)
            return
        self._post("result", {"transactions": transactions, "errors": errors, "id": job_id})

    @staticmethod
    def _parse(message_type: Optional[str], data: dict[str, Any], report: Callable[[int, int], None]):
        if message_type == PROCESS_XLSX:
            if "content" in data:
                return parse_xlsx(data["content"], progress=report)
            return parse_xlsx_rows(data["headers"], data["rows"], progress=report)
        if message_type == PROCESS_OFX:
            return parse_ofx(data["text"], progress=report)
        raise ParseError(f"Unknown message type: {message_type}")

    def _take_cancelled(self, job_id: str) -> bool:
        with self._lock:
            if job_id in self._cancelled:
                self._cancelled.discard(job_id)
                return True
            return False


def run_parse_job(
    worker: ImportWorker,
    message_type: str,
    data: dict[str, Any],
    on_progress: Optional[Callable[[int, int], None]] = None,
    timeout: Optional[float] = None,
) -> tuple[list, list[str]]:
    """Submit a job to a started worker and wait for its outcome.

    Args:
        worker: Started ImportWorker
        message_type: ``process-xlsx`` or ``process-ofx``
        data: Job payload
        on_progress: Optional ``(processed, total)`` callback
        timeout: Seconds to wait for each message

    Returns:
        Tuple of (normalized rows, row error messages)

    Raises:
        ParseError: If the worker reports an error
        queue.Empty: If no message arrives within ``timeout``
    """
    job_id = worker.submit({"type": message_type, "data": data})
    while True:
        message = worker.get_message(timeout=timeout)
        payload = message.get("data") or {}
        if payload.get("id") != job_id:
            continue
        if message["type"] == "progress":
            if on_progress is not None:
                on_progress(payload["processed"], payload["total"])
        elif message["type"] == "result":
            return payload["transactions"], payload["errors"]
        elif message["type"] == "error":
            raise ParseError(payload["error"])
