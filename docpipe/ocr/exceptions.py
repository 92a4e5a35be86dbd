class OcrError(Exception):
    """Base exception for OCR failures that end a document run."""


class SubmissionError(OcrError):
    """Raised when the provider rejects the file or is unreachable on submit."""


class TransientPollError(OcrError):
    """Raised when a single status check fails on network or timeout."""


class ProviderReportedError(OcrError):
    """Raised when the provider explicitly reports an error status."""


class OcrTimeoutError(OcrError):
    """Raised when the poll budget is exhausted without a terminal provider state."""
