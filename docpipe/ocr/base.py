from abc import ABC, abstractmethod
from pathlib import Path

from docpipe.ocr.models import OcrPollResult


class BaseOcrClient(ABC):
    """Contract for OCR provider adapters."""

    @abstractmethod
    async def submit(self, path: Path, file_name: str, mime_type: str) -> str:
        """Upload a file and return the provider's correlation handle.

        Raises:
            SubmissionError: if the provider rejects the file or is unreachable.
        """

    @abstractmethod
    async def get_status(self, handle: str) -> OcrPollResult:
        """Read the current state of a submitted file.

        Raises:
            TransientPollError: on network failure, timeout or unreadable reply.
        """

    async def aclose(self) -> None:
        """Release underlying connections."""
