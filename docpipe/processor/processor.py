import asyncio
from datetime import datetime, timezone
from pathlib import Path

from docpipe.config.settings import Settings
from docpipe.database.repositories.base import BaseDocumentRepository, BaseProfileRepository
from docpipe.database.repositories.document_repository import DocumentRepository
from docpipe.database.repositories.memory import (
    InMemoryDocumentRepository,
    InMemoryProfileRepository,
)
from docpipe.database.repositories.profile_repository import ProfileRepository
from docpipe.extraction.base import BaseExtractor
from docpipe.extraction.factory import ExtractorFactory
from docpipe.extraction.models import CompanyAttributes, ExtractionFailure
from docpipe.intake.intake import DocumentIntake
from docpipe.jobs.models import JobStatus
from docpipe.jobs.registry import JobRegistry
from docpipe.logging.logger import Log
from docpipe.ocr.base import BaseOcrClient
from docpipe.ocr.exceptions import OcrError
from docpipe.ocr.factory import OcrClientFactory
from docpipe.ocr.orchestrator import OcrOrchestrator, Sleep
from docpipe.processor.cleanup import DocumentCleanup
from docpipe.processor.exceptions import InvalidStatusTransitionError
from docpipe.processor.models import Document, DocumentStatus
from docpipe.profile.merger import ProfileMerger


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Processor:
    """Runs uploaded documents through the full processing pipeline.

    Pipeline: OCR submit -> poll -> extract -> merge profile -> cleanup.
    Every status change is written to the document record first and then
    mirrored into the job registry.
    """

    def __init__(
        self,
        *,
        doc_repo: BaseDocumentRepository,
        registry: JobRegistry,
        intake: DocumentIntake,
        ocr: OcrOrchestrator,
        extractor: BaseExtractor,
        merger: ProfileMerger,
        cleanup: DocumentCleanup,
        cleanup_after_processing: bool = True,
    ) -> None:
        self._doc_repo = doc_repo
        self._registry = registry
        self._intake = intake
        self._ocr = ocr
        self._extractor = extractor
        self._merger = merger
        self._cleanup = cleanup
        self._cleanup_after_processing = cleanup_after_processing

    async def submit(
        self,
        raw_bytes: bytes,
        file_name: str,
        mime_type: str,
        owner_id: int,
    ) -> str:
        """Accept an upload and return its document id."""
        return await self._intake.submit(raw_bytes, file_name, mime_type, owner_id)

    def get_status(self, document_id: str) -> JobStatus | None:
        """Return the current job snapshot, or None when not found."""
        return self._registry.get(document_id)

    async def cleanup(self, document_id: str) -> None:
        """Remove the stored upload of a document."""
        await self._cleanup.cleanup(document_id)

    async def aclose(self) -> None:
        """Close provider connections."""
        await self._ocr.aclose()

    async def run_pipeline(self, document_id: str) -> None:
        """Drive a pending document to completed or error.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            PersistenceError: if a storage write fails; the run is abandoned.
        """
        document = await self._doc_repo.find_by_id(document_id)
        if document.status is not DocumentStatus.PENDING:
            Log.warning(
                f"Document {document_id} is {document.status.value}, not pending; skipping"
            )
            return

        self._ensure_job(document)
        path = Path(document.storage_path)

        if not await asyncio.to_thread(path.exists):
            await self._fail(document, f"Stored file not found: {path}")
        else:
            await self._mark_processing(document)
            try:
                text = await self._ocr.recognize(
                    document.id, path, document.file_name, document.mime_type
                )
            except OcrError as exc:
                await self._fail(document, str(exc) or type(exc).__name__)
            else:
                await self._complete(document, text)

        if self._cleanup_after_processing:
            await self._cleanup.cleanup(document_id)

    def _ensure_job(self, document: Document) -> None:
        if self._registry.get(document.id) is None:
            self._registry.register(
                JobStatus(
                    document_id=document.id,
                    owner_id=document.owner_id,
                    file_name=document.file_name,
                    file_path=document.storage_path,
                    status=document.status,
                )
            )

    async def _mark_processing(self, document: Document) -> None:
        self._check_transition(document, DocumentStatus.PROCESSING)
        await self._doc_repo.mark_processing(document.id, _utcnow())
        document.status = DocumentStatus.PROCESSING
        self._registry.update(document.id, status=DocumentStatus.PROCESSING)
        Log.info(f"Document {document.id} marked as processing")

    async def _complete(self, document: Document, text: str) -> None:
        attributes = await self._extract(document, text)
        if not attributes.is_empty():
            await self._merger.merge(document.owner_id, attributes)

        extracted_data = attributes.to_dict()
        self._check_transition(document, DocumentStatus.COMPLETED)
        await self._doc_repo.mark_completed(document.id, text, extracted_data, _utcnow())
        document.status = DocumentStatus.COMPLETED
        self._registry.update(
            document.id,
            status=DocumentStatus.COMPLETED,
            extracted_text=text,
            extracted_data=extracted_data,
        )
        Log.info(f"Document {document.id} completed")

    async def _extract(self, document: Document, text: str) -> CompanyAttributes:
        if not text.strip():
            Log.warning(f"OCR returned no text for document {document.id}, skipping extraction")
            return CompanyAttributes()
        outcome = await self._extractor.extract(text, document.owner_id)
        if isinstance(outcome, ExtractionFailure):
            Log.warning(
                f"No company attributes derived from document {document.id}: {outcome.reason}"
            )
        return outcome.attributes

    async def _fail(self, document: Document, message: str) -> None:
        self._check_transition(document, DocumentStatus.ERROR)
        await self._doc_repo.mark_failed(document.id, message, _utcnow())
        document.status = DocumentStatus.ERROR
        self._registry.update(document.id, status=DocumentStatus.ERROR, message=message)
        Log.error(f"Document {document.id} marked as failed: {message}")

    @staticmethod
    def _check_transition(document: Document, target: DocumentStatus) -> None:
        if not document.status.can_transition_to(target):
            raise InvalidStatusTransitionError(
                f"Document {document.id} cannot move from "
                f"{document.status.value} to {target.value}"
            )


def build_processor(
    settings: Settings,
    *,
    registry: JobRegistry | None = None,
    doc_repo: BaseDocumentRepository | None = None,
    profile_repo: BaseProfileRepository | None = None,
    ocr_client: BaseOcrClient | None = None,
    extractor: BaseExtractor | None = None,
    sleep: Sleep = asyncio.sleep,
) -> Processor:
    """Build a Processor with all required adapters."""
    if registry is None:
        registry = JobRegistry(settings.job_retention_seconds)
    if doc_repo is None or profile_repo is None:
        default_doc_repo, default_profile_repo = _build_repositories(settings)
        doc_repo = doc_repo if doc_repo is not None else default_doc_repo
        profile_repo = profile_repo if profile_repo is not None else default_profile_repo

    intake = DocumentIntake(
        doc_repo,
        registry,
        uploads_dir=settings.uploads_dir,
        max_upload_bytes=settings.max_upload_bytes,
        allowed_mime_types=settings.allowed_mime_types,
    )
    ocr = OcrOrchestrator(
        ocr_client if ocr_client is not None else OcrClientFactory.create(settings),
        registry,
        poll_interval_seconds=settings.ocr_poll_interval_seconds,
        max_attempts=settings.ocr_max_poll_attempts,
        sleep=sleep,
    )
    return Processor(
        doc_repo=doc_repo,
        registry=registry,
        intake=intake,
        ocr=ocr,
        extractor=extractor if extractor is not None else ExtractorFactory.create(settings),
        merger=ProfileMerger(profile_repo),
        cleanup=DocumentCleanup(doc_repo, registry),
        cleanup_after_processing=settings.cleanup_after_processing,
    )


def _build_repositories(
    settings: Settings,
) -> tuple[BaseDocumentRepository, BaseProfileRepository]:
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return InMemoryDocumentRepository(), InMemoryProfileRepository()
    if backend == "postgres":
        return DocumentRepository(), ProfileRepository()
    raise ValueError(
        f"Unknown storage backend '{backend}'. Choose from: ['memory', 'postgres']"
    )
