"""In-process storage adapters for local runs and tests."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from docpipe.database.repositories.base import BaseDocumentRepository, BaseProfileRepository
from docpipe.processor.exceptions import DocumentNotFoundError
from docpipe.processor.models import Document, DocumentStatus
from docpipe.profile.models import UserProfile


class InMemoryDocumentRepository(BaseDocumentRepository):
    """Keeps documents in a dict keyed by document id."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self.status_history: dict[str, list[DocumentStatus]] = {}

    async def create(self, document: Document) -> None:
        self._documents[document.id] = replace(document)
        self.status_history[document.id] = [document.status]

    async def find_by_id(self, document_id: str) -> Document:
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return replace(document)

    async def mark_processing(self, document_id: str, started_at: datetime) -> None:
        self._apply(
            document_id,
            status=DocumentStatus.PROCESSING,
            processing_started_at=started_at,
        )

    async def mark_completed(
        self,
        document_id: str,
        extracted_text: str,
        extracted_data: dict[str, Any],
        completed_at: datetime,
    ) -> None:
        self._apply(
            document_id,
            status=DocumentStatus.COMPLETED,
            extracted_text=extracted_text,
            extracted_data=extracted_data,
            processing_completed_at=completed_at,
        )

    async def mark_failed(
        self,
        document_id: str,
        error_message: str,
        completed_at: datetime,
    ) -> None:
        self._apply(
            document_id,
            status=DocumentStatus.ERROR,
            error_message=error_message,
            processing_completed_at=completed_at,
        )

    def _apply(self, document_id: str, **changes: Any) -> None:
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        self._documents[document_id] = replace(document, **changes)
        self.status_history[document_id].append(changes["status"])


class InMemoryProfileRepository(BaseProfileRepository):
    """Keeps one profile per owner in a dict."""

    def __init__(self) -> None:
        self._profiles: dict[int, UserProfile] = {}

    async def find_by_owner(self, owner_id: int) -> UserProfile | None:
        return self._profiles.get(owner_id)

    async def create(self, profile: UserProfile) -> UserProfile:
        now = datetime.now(timezone.utc)
        stored = replace(profile, created_at=now, updated_at=now)
        self._profiles[profile.owner_id] = stored
        return stored

    async def update(self, profile: UserProfile) -> UserProfile:
        stored = replace(profile, updated_at=datetime.now(timezone.utc))
        self._profiles[profile.owner_id] = stored
        return stored
