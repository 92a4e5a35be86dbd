class ExtractionError(Exception):
    """Raised when company attribute extraction fails."""


class ExtractionParseError(ExtractionError):
    """Raised when the model response does not match the expected structure."""


class ExtractionNetworkError(ExtractionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
