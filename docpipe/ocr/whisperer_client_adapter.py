"""Client for the LLMWhisperer text extraction API."""

import asyncio
from pathlib import Path
from typing import Any

import httpx

from docpipe.ocr.base import BaseOcrClient
from docpipe.ocr.exceptions import SubmissionError, TransientPollError
from docpipe.ocr.models import OcrPollResult, OcrState

_ERROR_STATES = frozenset({"error", "failed"})


class WhispererClientAdapter(BaseOcrClient):
    """OCR adapter built on the LLMWhisperer submit/status HTTP API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        submit_timeout_seconds: float = 180.0,
        status_timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {api_key}"}
        self._submit_timeout = submit_timeout_seconds
        self._status_timeout = status_timeout_seconds
        self._client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None

    async def submit(self, path: Path, file_name: str, mime_type: str) -> str:
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise SubmissionError(f"Cannot read stored file {path}: {exc}") from exc

        try:
            response = await self._client.post(
                f"{self._base_url}/whisper",
                headers=self._headers,
                files={"file": (file_name, content, mime_type)},
                timeout=self._submit_timeout,
            )
        except httpx.HTTPError as exc:
            raise SubmissionError(f"OCR provider unreachable: {exc}") from exc

        payload = self._json_or_empty(response)
        if not response.is_success:
            message = payload.get("message") or f"HTTP {response.status_code}"
            raise SubmissionError(f"OCR provider rejected document: {message}")

        handle = payload.get("hash") or payload.get("whisper_hash")
        if not handle:
            raise SubmissionError(
                payload.get("message") or "Failed to process document with OCR"
            )
        return str(handle)

    async def get_status(self, handle: str) -> OcrPollResult:
        try:
            response = await self._client.get(
                f"{self._base_url}/whisper/{handle}",
                headers=self._headers,
                timeout=self._status_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise TransientPollError(f"OCR status check failed: {exc}") from exc
        except ValueError as exc:
            raise TransientPollError(f"OCR status reply is not JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise TransientPollError("OCR status reply must be an object")

        status = str(payload.get("status") or "").lower()
        if status == "complete":
            return OcrPollResult(state=OcrState.COMPLETE, text=payload.get("text") or "")
        if status in _ERROR_STATES:
            return OcrPollResult(
                state=OcrState.ERROR,
                message=payload.get("message") or "Error processing document with OCR",
            )
        return OcrPollResult(state=OcrState.IN_PROGRESS)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
