from dataclasses import dataclass
from enum import Enum


class OcrState(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class OcrPollResult:
    """One status reading from the OCR provider."""

    state: OcrState
    text: str = ""
    message: str | None = None
