from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from docpipe.processor.models import Document
from docpipe.profile.models import UserProfile


class BaseDocumentRepository(ABC):
    """Contract for document storage adapters.

    All methods raise PersistenceError when the backend fails.
    """

    @abstractmethod
    async def create(self, document: Document) -> None:
        """Insert a new document record."""

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Document:
        """Load a document.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """

    @abstractmethod
    async def mark_processing(self, document_id: str, started_at: datetime) -> None:
        """Set status=processing and the processing start time."""

    @abstractmethod
    async def mark_completed(
        self,
        document_id: str,
        extracted_text: str,
        extracted_data: dict[str, Any],
        completed_at: datetime,
    ) -> None:
        """Set status=completed with the extraction results."""

    @abstractmethod
    async def mark_failed(
        self,
        document_id: str,
        error_message: str,
        completed_at: datetime,
    ) -> None:
        """Set status=error with the failure message."""


class BaseProfileRepository(ABC):
    """Contract for user profile storage adapters."""

    @abstractmethod
    async def find_by_owner(self, owner_id: int) -> UserProfile | None:
        """Return the owner's profile, or None when the owner has none."""

    @abstractmethod
    async def create(self, profile: UserProfile) -> UserProfile:
        """Insert a profile and return it with timestamps set."""

    @abstractmethod
    async def update(self, profile: UserProfile) -> UserProfile:
        """Overwrite the owner's profile fields and return the stored profile."""
