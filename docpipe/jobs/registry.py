import threading
import time
from collections.abc import Callable
from copy import deepcopy
from dataclasses import dataclass, replace

from docpipe.jobs.models import JobStatus
from docpipe.logging.logger import Log


@dataclass
class _Entry:
    job: JobStatus
    terminal_at: float | None = None


class JobRegistry:
    """Process-wide map of document id to JobStatus.

    Each run writes only its own entry; the lock guards the map itself so
    lookups from other threads (a status endpoint, for instance) never see
    a half-applied insert or eviction.

    Terminal entries are kept for ``retention_seconds`` after they became
    terminal and are purged lazily on ``register`` and ``get``. A retention of
    0 keeps every entry for the life of the process.
    """

    def __init__(
        self,
        retention_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._retention_seconds = retention_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def register(self, job: JobStatus) -> None:
        """Insert or replace the entry for ``job.document_id``."""
        with self._lock:
            self._purge_expired()
            self._entries[job.document_id] = _Entry(
                job=deepcopy(job),
                terminal_at=self._clock() if job.status.is_terminal else None,
            )

    def update(self, document_id: str, **changes: object) -> JobStatus | None:
        """Apply field changes to an entry and return the new snapshot.

        Returns None when the entry is unknown (never registered or evicted).
        A terminal entry is frozen: changes are dropped and the current
        snapshot is returned.
        """
        with self._lock:
            entry = self._entries.get(document_id)
            if entry is None:
                Log.debug(f"Job {document_id} not in registry, update skipped")
                return None
            if entry.job.status.is_terminal:
                Log.warning(
                    f"Job {document_id} is already {entry.job.status.value}, update ignored"
                )
                return deepcopy(entry.job)
            status = changes.get("status", entry.job.status)
            if status is not entry.job.status and not entry.job.status.can_transition_to(
                status  # type: ignore[arg-type]
            ):
                Log.warning(
                    f"Job {document_id} cannot move from {entry.job.status.value} "
                    f"to {status}, update ignored"
                )
                return deepcopy(entry.job)
            entry.job = replace(entry.job, **deepcopy(changes))
            if entry.job.status.is_terminal:
                entry.terminal_at = self._clock()
            return deepcopy(entry.job)

    def get(self, document_id: str) -> JobStatus | None:
        """Return a snapshot of the job, or None when not found."""
        with self._lock:
            self._purge_expired()
            entry = self._entries.get(document_id)
            return deepcopy(entry.job) if entry is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired(self) -> None:
        if self._retention_seconds <= 0:
            return
        now = self._clock()
        expired = [
            document_id
            for document_id, entry in self._entries.items()
            if entry.terminal_at is not None
            and now - entry.terminal_at >= self._retention_seconds
        ]
        for document_id in expired:
            del self._entries[document_id]
        if expired:
            Log.debug(f"Evicted {len(expired)} finished jobs from registry")
