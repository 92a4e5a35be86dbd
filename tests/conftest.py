from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from docpipe.config.settings import Settings
from docpipe.database.repositories.memory import (
    InMemoryDocumentRepository,
    InMemoryProfileRepository,
)
from docpipe.extraction.extractor import CompanyExtractor
from docpipe.jobs.registry import JobRegistry
from docpipe.processor.processor import Processor, build_processor
from tests.helpers import RecordingSleep, company_json, complete


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage_backend="memory",
        uploads_dir=tmp_path / "uploads",
        ocr_provider="example",
        extraction_provider="example",
        ocr_poll_interval_seconds=10.0,
        ocr_max_poll_attempts=20,
    )


@pytest.fixture()
def registry() -> JobRegistry:
    return JobRegistry(retention_seconds=0)


@pytest.fixture()
def doc_repo() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture()
def profile_repo() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture()
def ocr_client() -> MagicMock:
    client = MagicMock()
    client.submit = AsyncMock(return_value="whisper-hash-1")
    client.get_status = AsyncMock(return_value=complete("Acme LLC builds roads."))
    client.aclose = AsyncMock()
    return client


@pytest.fixture()
def ai_client() -> MagicMock:
    client = MagicMock()
    client.create_chat_completion = AsyncMock(return_value=company_json())
    return client


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def processor(
    settings: Settings,
    registry: JobRegistry,
    doc_repo: InMemoryDocumentRepository,
    profile_repo: InMemoryProfileRepository,
    ocr_client: MagicMock,
    ai_client: MagicMock,
    recording_sleep: RecordingSleep,
) -> Processor:
    return build_processor(
        settings,
        registry=registry,
        doc_repo=doc_repo,
        profile_repo=profile_repo,
        ocr_client=ocr_client,
        extractor=CompanyExtractor(client=ai_client, model="test-model"),
        sleep=recording_sleep,
    )
