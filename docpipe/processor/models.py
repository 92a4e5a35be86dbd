from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    """Lifecycle of an uploaded document."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentStatus.COMPLETED, DocumentStatus.ERROR)

    def can_transition_to(self, target: "DocumentStatus") -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.PENDING: frozenset({DocumentStatus.PROCESSING, DocumentStatus.ERROR}),
    DocumentStatus.PROCESSING: frozenset({DocumentStatus.COMPLETED, DocumentStatus.ERROR}),
    DocumentStatus.COMPLETED: frozenset(),
    DocumentStatus.ERROR: frozenset(),
}


@dataclass
class Document:
    """Persisted record of one uploaded file and its processing outcome."""

    id: str
    owner_id: int
    file_name: str
    mime_type: str
    storage_path: str
    size_bytes: int
    status: DocumentStatus = DocumentStatus.PENDING
    extracted_text: str | None = None
    extracted_data: dict[str, Any] | None = None
    error_message: str | None = None
    uploaded_at: datetime | None = None
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
