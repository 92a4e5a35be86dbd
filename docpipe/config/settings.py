from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "docpipe"
    db_username: str = "docpipe"
    db_password: str = "secret"

    storage_backend: str = "postgres"

    uploads_dir: Path = Path("uploads")
    max_upload_bytes: int = 20 * 1024 * 1024
    allowed_mime_types: list[str] = [
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/tiff",
    ]

    ocr_provider: str = "llmwhisperer"
    ocr_api_base_url: str = "https://llmwhisperer-api.us-central.unstract.com/api/v2"
    ocr_api_key: str = ""
    ocr_submit_timeout_seconds: int = 180
    ocr_status_timeout_seconds: int = 30
    ocr_poll_interval_seconds: float = 10.0
    ocr_max_poll_attempts: int = 20

    extraction_provider: str = "openai"
    extraction_api_key: str = ""
    extraction_model_name: str = "gpt-4o"
    extraction_timeout_seconds: int = 60
    extraction_temperature: float = 0.2
    extraction_openai_compatible_base_url: str | None = None
    extraction_max_text_chars: int = 10_000

    job_retention_seconds: int = 3600
    cleanup_after_processing: bool = True
