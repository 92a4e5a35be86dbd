from dataclasses import dataclass
from typing import Any

from docpipe.processor.models import DocumentStatus


@dataclass
class JobStatus:
    """In-process view of a document's processing run."""

    document_id: str
    owner_id: int
    file_name: str
    file_path: str
    status: DocumentStatus = DocumentStatus.PENDING
    message: str | None = None
    provider_handle: str | None = None
    poll_attempts: int = 0
    extracted_text: str | None = None
    extracted_data: dict[str, Any] | None = None
