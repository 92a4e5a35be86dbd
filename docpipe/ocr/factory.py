from docpipe.config.settings import Settings
from docpipe.ocr.base import BaseOcrClient
from docpipe.ocr.example_client_adapter import ExampleOcrClientAdapter
from docpipe.ocr.whisperer_client_adapter import WhispererClientAdapter


class OcrClientFactory:
    """Creates the configured OCR client adapter."""

    @staticmethod
    def create(settings: Settings) -> BaseOcrClient:
        provider = settings.ocr_provider.lower()
        if provider == "example":
            return ExampleOcrClientAdapter()
        if provider == "llmwhisperer":
            return WhispererClientAdapter(
                api_key=settings.ocr_api_key,
                base_url=settings.ocr_api_base_url,
                submit_timeout_seconds=settings.ocr_submit_timeout_seconds,
                status_timeout_seconds=settings.ocr_status_timeout_seconds,
            )
        raise ValueError(
            f"Unknown OCR provider '{provider}'. Choose from: ['example', 'llmwhisperer']"
        )
