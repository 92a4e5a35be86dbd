"""Example OCR client adapter.

Use this module as a reference when implementing new OCR provider adapters.
Implement BaseOcrClient and register the provider in OcrClientFactory.
"""

import uuid
from pathlib import Path
from typing import ClassVar

from docpipe.ocr.base import BaseOcrClient
from docpipe.ocr.models import OcrPollResult, OcrState


class ExampleOcrClientAdapter(BaseOcrClient):
    """Offline adapter that completes every document on the first poll.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_TEXT: ClassVar[str] = (
        "Example Trading LLC provides general construction and facility "
        "maintenance services."
    )

    def __init__(self, text: str | None = None) -> None:
        self._text = text if text is not None else self.DEFAULT_TEXT

    async def submit(self, path: Path, file_name: str, mime_type: str) -> str:
        _ = path, file_name, mime_type
        return uuid.uuid4().hex

    async def get_status(self, handle: str) -> OcrPollResult:
        _ = handle
        return OcrPollResult(state=OcrState.COMPLETE, text=self._text)
