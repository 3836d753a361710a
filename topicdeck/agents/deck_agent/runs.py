"""Background execution of deck runs, one at a time."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from topicdeck.slide_generation.errors import PipelineError, RunCancelledError

logger = logging.getLogger(__name__)


class RunInProgressError(RuntimeError):
    pass


@dataclass
class RunRecord:
    run_id: str
    topic: str
    presentation_id: Optional[str] = None
    status: str = "pending"
    progress: float = 0.0
    transcript: str = ""
    error: Optional[str] = None
    image_failures: List[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)
    done: threading.Event = field(default_factory=threading.Event, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set_progress(self, value: float) -> None:
        with self._lock:
            self.progress = value

    def set_transcript(self, text: str) -> None:
        with self._lock:
            self.transcript = text

    def set_error(self, message: str) -> None:
        with self._lock:
            self.error = message

    def finish(self, status: str) -> None:
        with self._lock:
            self.status = status
            self.finished_at = time.time()

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "runId": self.run_id,
                "topic": self.topic,
                "presentationId": self.presentation_id,
                "status": self.status,
                "progress": self.progress,
                "transcript": self.transcript,
                "error": self.error,
                "imageFailures": list(self.image_failures),
                "startedAt": self.started_at,
                "finishedAt": self.finished_at,
            }


class RunRegistry:
    """Keeps recent run records in memory and refuses a second concurrent run.

    Only the newest ``max_finished`` finished records are retained.
    """

    def __init__(self, max_finished: int = 50) -> None:
        if max_finished < 1:
            raise ValueError("max_finished must be at least 1")
        self.max_finished = max_finished
        self._lock = threading.Lock()
        self._runs: Dict[str, RunRecord] = {}
        self._active: Optional[str] = None

    @property
    def active_run_id(self) -> Optional[str]:
        return self._active

    def start(
        self,
        topic: str,
        runner: Callable[[RunRecord], None],
        *,
        presentation_id: Optional[str] = None,
    ) -> RunRecord:
        with self._lock:
            if self._active is not None:
                raise RunInProgressError(f"Run {self._active} is still in progress")
            record = RunRecord(run_id=uuid4().hex, topic=topic, presentation_id=presentation_id)
            self._runs[record.run_id] = record
            self._active = record.run_id
        thread = threading.Thread(
            target=self._execute,
            args=(record, runner),
            name=f"deck-run-{record.run_id[:8]}",
            daemon=True,
        )
        thread.start()
        return record

    def _execute(self, record: RunRecord, runner: Callable[[RunRecord], None]) -> None:
        record.status = "running"
        status = "failed"
        try:
            runner(record)
            status = "succeeded"
        except RunCancelledError:
            status = "cancelled"
        except PipelineError as exc:
            if record.error is None:
                record.set_error(f"Error: {exc}")
        except Exception as exc:
            logger.exception("Deck run %s crashed", record.run_id)
            record.set_error(f"Error: {exc}")
        finally:
            with self._lock:
                if self._active == record.run_id:
                    self._active = None
            record.finish(status)
            self._evict_finished()
            record.done.set()

    def _evict_finished(self) -> None:
        with self._lock:
            finished = [run_id for run_id, run in self._runs.items() if run.finished_at is not None]
            for run_id in finished[: max(0, len(finished) - self.max_finished)]:
                del self._runs[run_id]

    def get(self, run_id: str) -> Optional[RunRecord]:
        with self._lock:
            return self._runs.get(run_id)

    def cancel(self, run_id: str) -> bool:
        record = self.get(run_id)
        if record is None or record.done.is_set():
            return False
        record.cancel_event.set()
        return True


__all__ = ["RunInProgressError", "RunRecord", "RunRegistry"]
