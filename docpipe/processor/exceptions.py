class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class ValidationError(ProcessorError):
    """Raised when an upload is rejected at intake. No job is created."""


class DocumentNotFoundError(ProcessorError):
    """Raised when a document cannot be found in storage."""


class InvalidStatusTransitionError(ProcessorError):
    """Raised when a document status change would reverse or skip a step."""
