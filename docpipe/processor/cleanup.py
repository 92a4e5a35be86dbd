import asyncio
from pathlib import Path

from docpipe.database.repositories.base import BaseDocumentRepository
from docpipe.jobs.models import JobStatus
from docpipe.jobs.registry import JobRegistry
from docpipe.logging.logger import Log
from docpipe.processor.exceptions import DocumentNotFoundError


class DocumentCleanup:
    """Removes the stored upload of a finished document.

    Only the file on disk is touched; the document record and the job entry
    stay as they are. Missing files and unknown documents are ignored, and a
    file that cannot be removed is logged and left in place.
    """

    def __init__(self, doc_repo: BaseDocumentRepository, registry: JobRegistry) -> None:
        self._doc_repo = doc_repo
        self._registry = registry

    async def cleanup(self, document_id: str) -> None:
        job = self._registry.get(document_id)
        if job is not None and not job.status.is_terminal:
            Log.warning(
                f"Document {document_id} is still {job.status.value}, cleanup skipped"
            )
            return
        path = await self._resolve_path(document_id, job)
        if path is None:
            Log.debug(f"No stored file known for document {document_id}")
            return
        if await asyncio.to_thread(self._remove, path):
            Log.info(f"Removed stored file for document {document_id}")

    async def _resolve_path(self, document_id: str, job: JobStatus | None) -> Path | None:
        if job is not None and job.file_path:
            return Path(job.file_path)
        try:
            document = await self._doc_repo.find_by_id(document_id)
        except DocumentNotFoundError:
            return None
        if not document.status.is_terminal:
            Log.warning(
                f"Document {document_id} is still {document.status.value}, cleanup skipped"
            )
            return None
        return Path(document.storage_path) if document.storage_path else None

    @staticmethod
    def _remove(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            Log.warning(f"Could not remove stored file {path}: {exc}")
            return False
        return True
