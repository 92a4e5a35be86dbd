import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from docpipe.database.exceptions import PersistenceError
from docpipe.database.repositories.memory import InMemoryDocumentRepository
from docpipe.intake.intake import DocumentIntake, sanitize_file_name, stored_file_path
from docpipe.jobs.registry import JobRegistry
from docpipe.processor.exceptions import ValidationError
from docpipe.processor.models import DocumentStatus


def _make_intake(
    tmp_path: Path,
    doc_repo: InMemoryDocumentRepository | None = None,
    registry: JobRegistry | None = None,
    max_upload_bytes: int = 1024,
) -> tuple[DocumentIntake, InMemoryDocumentRepository, JobRegistry]:
    if doc_repo is None:
        doc_repo = InMemoryDocumentRepository()
    if registry is None:
        registry = JobRegistry()
    intake = DocumentIntake(
        doc_repo,
        registry,
        uploads_dir=tmp_path / "uploads",
        max_upload_bytes=max_upload_bytes,
        allowed_mime_types=["application/pdf", "image/png"],
    )
    return intake, doc_repo, registry


class TestSanitizeFileName:
    def test_keeps_safe_characters(self) -> None:
        assert sanitize_file_name("contract-2024.v1.pdf") == "contract-2024.v1.pdf"

    def test_replaces_unsafe_characters(self) -> None:
        assert sanitize_file_name("my contract (final)/x.pdf") == "my_contract__final__x.pdf"

    def test_stored_path_uses_document_id_and_lowercase_suffix(self, tmp_path: Path) -> None:
        path = stored_file_path(tmp_path, "abc", "Scan.PDF")
        assert path == tmp_path / "abc.pdf"


class TestSubmit:
    def test_writes_file_and_creates_pending_document(self, tmp_path: Path) -> None:
        intake, doc_repo, _registry = _make_intake(tmp_path)

        document_id = asyncio.run(
            intake.submit(b"%PDF-1.4 data", "contract.pdf", "application/pdf", 7)
        )

        document = asyncio.run(doc_repo.find_by_id(document_id))
        assert document.status is DocumentStatus.PENDING
        assert document.owner_id == 7
        assert document.size_bytes == len(b"%PDF-1.4 data")
        assert Path(document.storage_path).read_bytes() == b"%PDF-1.4 data"
        assert Path(document.storage_path).name == f"{document_id}.pdf"
        assert document.uploaded_at is not None

    def test_registers_pending_job(self, tmp_path: Path) -> None:
        intake, _repo, registry = _make_intake(tmp_path)

        document_id = asyncio.run(
            intake.submit(b"data", "my file.pdf", "application/pdf", 7)
        )

        job = registry.get(document_id)
        assert job is not None
        assert job.status is DocumentStatus.PENDING
        assert job.file_name == "my_file.pdf"

    def test_generates_unique_ids(self, tmp_path: Path) -> None:
        intake, _repo, _registry = _make_intake(tmp_path)

        first = asyncio.run(intake.submit(b"a", "a.pdf", "application/pdf", 7))
        second = asyncio.run(intake.submit(b"b", "a.pdf", "application/pdf", 7))

        assert first != second


class TestValidation:
    @pytest.mark.parametrize(
        ("raw", "name", "mime", "owner", "match"),
        [
            (b"", "a.pdf", "application/pdf", 7, "empty"),
            (b"x" * 2048, "a.pdf", "application/pdf", 7, "limit"),
            (b"x", "  ", "application/pdf", 7, "name"),
            (b"x", "a.exe", "application/x-msdownload", 7, "Unsupported"),
            (b"x", "a.pdf", "application/pdf", 0, "owner"),
        ],
    )
    def test_rejects_bad_input(
        self,
        tmp_path: Path,
        raw: bytes,
        name: str,
        mime: str,
        owner: int,
        match: str,
    ) -> None:
        intake, _repo, registry = _make_intake(tmp_path)

        with pytest.raises(ValidationError, match=match):
            asyncio.run(intake.submit(raw, name, mime, owner))

        assert len(registry) == 0

    def test_write_failure_raises_validation_error(self, tmp_path: Path) -> None:
        intake, _repo, registry = _make_intake(tmp_path)

        with patch.object(Path, "write_bytes", side_effect=OSError("disk full")):
            with pytest.raises(ValidationError, match="Failed to save"):
                asyncio.run(intake.submit(b"x", "a.pdf", "application/pdf", 7))

        assert len(registry) == 0


class TestPersistenceFailure:
    def test_removes_file_and_propagates(self, tmp_path: Path) -> None:
        doc_repo = InMemoryDocumentRepository()
        doc_repo.create = AsyncMock(side_effect=PersistenceError("db down"))  # type: ignore[method-assign]
        intake, _repo, registry = _make_intake(tmp_path, doc_repo=doc_repo)

        with pytest.raises(PersistenceError):
            asyncio.run(intake.submit(b"x", "a.pdf", "application/pdf", 7))

        assert list((tmp_path / "uploads" / "temp").iterdir()) == []
        assert len(registry) == 0
