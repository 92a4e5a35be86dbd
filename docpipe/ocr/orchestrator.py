import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from docpipe.jobs.registry import JobRegistry
from docpipe.logging.logger import Log
from docpipe.ocr.base import BaseOcrClient
from docpipe.ocr.exceptions import OcrTimeoutError, ProviderReportedError, TransientPollError
from docpipe.ocr.models import OcrState

Sleep = Callable[[float], Awaitable[None]]


class OcrOrchestrator:
    """Submits a stored file to the OCR provider and polls until a terminal outcome.

    Polling is bounded: the loop waits ``poll_interval_seconds`` before each of
    at most ``max_attempts`` status checks, so every run ends within
    ``poll_interval_seconds * max_attempts`` of a successful submission.
    """

    def __init__(
        self,
        client: BaseOcrClient,
        registry: JobRegistry,
        *,
        poll_interval_seconds: float = 10.0,
        max_attempts: int = 20,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._client = client
        self._registry = registry
        self._poll_interval = poll_interval_seconds
        self._max_attempts = max_attempts
        self._sleep = sleep

    async def recognize(
        self,
        document_id: str,
        path: Path,
        file_name: str,
        mime_type: str,
    ) -> str:
        """Return the text recognized by the provider.

        Raises:
            SubmissionError: the provider rejected the upload; nothing was polled.
            ProviderReportedError: the provider reported an error status.
            TransientPollError: the final status check failed.
            OcrTimeoutError: the attempt budget ran out.
        """
        handle = await self._client.submit(path, file_name, mime_type)
        self._registry.update(document_id, provider_handle=handle)
        Log.info(f"Document {document_id} submitted to OCR provider (handle {handle})")
        return await self._poll(document_id, handle)

    async def _poll(self, document_id: str, handle: str) -> str:
        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._poll_interval)
            self._registry.update(document_id, poll_attempts=attempt)

            try:
                result = await self._client.get_status(handle)
            except TransientPollError as exc:
                if attempt == self._max_attempts:
                    raise
                Log.warning(
                    f"OCR status check {attempt}/{self._max_attempts} for document "
                    f"{document_id} failed, retrying: {exc}"
                )
                continue

            if result.state is OcrState.COMPLETE:
                self._registry.update(document_id, extracted_text=result.text)
                Log.info(
                    f"OCR complete for document {document_id} after {attempt} attempts: "
                    f"{len(result.text)} chars"
                )
                return result.text
            if result.state is OcrState.ERROR:
                raise ProviderReportedError(
                    result.message or "Error processing document with OCR"
                )
            Log.debug(
                f"OCR still running for document {document_id} "
                f"(attempt {attempt}/{self._max_attempts})"
            )

        raise OcrTimeoutError(
            f"OCR processing timed out after {self._max_attempts} attempts"
        )

    async def aclose(self) -> None:
        await self._client.aclose()
