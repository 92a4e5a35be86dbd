import asyncio

from docpipe.jobs.registry import JobRegistry
from docpipe.logging.logger import Log
from docpipe.processor.models import DocumentStatus
from docpipe.processor.processor import Processor


class JobRunner:
    """Runs each document's pipeline as its own asyncio task."""

    def __init__(self, processor: Processor, registry: JobRegistry) -> None:
        self._processor = processor
        self._registry = registry
        self._tasks: set[asyncio.Task[None]] = set()

    def start(self, document_id: str) -> asyncio.Task[None]:
        """Schedule a run and return its task. Must be called inside a running loop."""
        task = asyncio.create_task(self.run(document_id), name=f"document-{document_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, document_id: str) -> None:
        """Execute a single run with error handling."""
        Log.info(f"Running pipeline for document {document_id}")
        try:
            await self._processor.run_pipeline(document_id)
        except Exception as exc:
            self._handle_failure(document_id, exc)
            return
        job = self._registry.get(document_id)
        status = job.status.value if job is not None else "unknown"
        Log.info(f"Pipeline for document {document_id} finished with status {status}")

    async def drain(self) -> None:
        """Wait for every scheduled run to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _handle_failure(self, document_id: str, exc: Exception) -> None:
        """Record an abandoned run in the registry; the stored document is left as is."""
        Log.exception(f"Pipeline for document {document_id} abandoned: {exc}")
        job = self._registry.get(document_id)
        if job is None or job.status.is_terminal:
            return
        self._registry.update(
            document_id,
            status=DocumentStatus.ERROR,
            message=str(exc) or type(exc).__name__,
        )
