import asyncio
import re
import uuid
from collections.abc import Collection
from datetime import datetime, timezone
from pathlib import Path

from docpipe.database.exceptions import PersistenceError
from docpipe.database.repositories.base import BaseDocumentRepository
from docpipe.jobs.models import JobStatus
from docpipe.jobs.registry import JobRegistry
from docpipe.logging.logger import Log
from docpipe.processor.exceptions import ValidationError
from docpipe.processor.models import Document, DocumentStatus

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_file_name(file_name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore."""
    return _UNSAFE_CHARS.sub("_", file_name)


def stored_file_path(temp_dir: Path, document_id: str, file_name: str) -> Path:
    """Build path to the stored upload: {temp_dir}/{document_id}{ext}"""
    suffix = sanitize_file_name(Path(file_name).suffix).lower()
    return temp_dir / f"{document_id}{suffix}"


def ensure_upload_directories(uploads_dir: Path) -> Path:
    """Create the upload tree if missing and return the temp directory."""
    temp_dir = uploads_dir / "temp"
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


class DocumentIntake:
    """Accepts an upload, stores the file and registers a pending job."""

    def __init__(
        self,
        doc_repo: BaseDocumentRepository,
        registry: JobRegistry,
        *,
        uploads_dir: Path,
        max_upload_bytes: int,
        allowed_mime_types: Collection[str],
    ) -> None:
        self._doc_repo = doc_repo
        self._registry = registry
        self._uploads_dir = uploads_dir
        self._max_upload_bytes = max_upload_bytes
        self._allowed_mime_types = frozenset(allowed_mime_types)

    async def submit(
        self,
        raw_bytes: bytes,
        file_name: str,
        mime_type: str,
        owner_id: int,
    ) -> str:
        """Store an upload and return the new document id.

        Raises:
            ValidationError: on bad input or when the file cannot be written.
            PersistenceError: when the document record cannot be created.
        """
        self._validate(raw_bytes, file_name, mime_type, owner_id)

        document_id = str(uuid.uuid4())
        path = await self._write_file(document_id, file_name, raw_bytes)
        document = Document(
            id=document_id,
            owner_id=owner_id,
            file_name=sanitize_file_name(file_name),
            mime_type=mime_type,
            storage_path=str(path),
            size_bytes=len(raw_bytes),
            status=DocumentStatus.PENDING,
            uploaded_at=datetime.now(timezone.utc),
        )

        try:
            await self._doc_repo.create(document)
        except PersistenceError:
            await asyncio.to_thread(path.unlink, missing_ok=True)
            raise

        self._registry.register(
            JobStatus(
                document_id=document_id,
                owner_id=owner_id,
                file_name=document.file_name,
                file_path=document.storage_path,
            )
        )
        Log.info(
            f"Accepted document {document_id} ({len(raw_bytes)} bytes) for user {owner_id}"
        )
        return document_id

    def _validate(
        self,
        raw_bytes: bytes,
        file_name: str,
        mime_type: str,
        owner_id: int,
    ) -> None:
        if owner_id <= 0:
            raise ValidationError(f"Invalid owner id: {owner_id}")
        if not file_name or not file_name.strip():
            raise ValidationError("File name is required")
        if not raw_bytes:
            raise ValidationError("Uploaded file is empty")
        if len(raw_bytes) > self._max_upload_bytes:
            raise ValidationError(
                f"Uploaded file is {len(raw_bytes)} bytes, limit is {self._max_upload_bytes}"
            )
        if mime_type not in self._allowed_mime_types:
            raise ValidationError(f"Unsupported file type '{mime_type}'")

    async def _write_file(self, document_id: str, file_name: str, raw_bytes: bytes) -> Path:
        def write() -> Path:
            temp_dir = ensure_upload_directories(self._uploads_dir)
            path = stored_file_path(temp_dir, document_id, file_name)
            path.write_bytes(raw_bytes)
            return path

        try:
            return await asyncio.to_thread(write)
        except OSError as exc:
            Log.error(f"Failed to save uploaded file {file_name!r}: {exc}")
            raise ValidationError("Failed to save uploaded file") from exc
