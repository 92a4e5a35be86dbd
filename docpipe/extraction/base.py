from abc import ABC, abstractmethod

from docpipe.extraction.models import ExtractionOutcome


class BaseExtractor(ABC):
    """Contract for company attribute extractors."""

    @abstractmethod
    async def extract(self, text: str, owner_id: int) -> ExtractionOutcome:
        """Derive company attributes from document text.

        Never raises for a bad model reply or a provider failure; those come
        back as ExtractionFailure.
        """
