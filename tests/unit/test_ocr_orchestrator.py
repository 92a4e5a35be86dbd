import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from docpipe.jobs.models import JobStatus
from docpipe.jobs.registry import JobRegistry
from docpipe.ocr.exceptions import (
    OcrTimeoutError,
    ProviderReportedError,
    SubmissionError,
    TransientPollError,
)
from docpipe.ocr.orchestrator import OcrOrchestrator
from tests.helpers import RecordingSleep, complete, in_progress, provider_error


def _make_orchestrator(
    statuses: list[object],
    max_attempts: int = 20,
) -> tuple[OcrOrchestrator, MagicMock, JobRegistry, RecordingSleep]:
    client = MagicMock()
    client.submit = AsyncMock(return_value="hash-1")
    client.get_status = AsyncMock(side_effect=statuses)
    client.aclose = AsyncMock()
    registry = JobRegistry()
    registry.register(
        JobStatus(document_id="doc-1", owner_id=7, file_name="a.pdf", file_path="/tmp/a.pdf")
    )
    sleep = RecordingSleep()
    orchestrator = OcrOrchestrator(
        client,
        registry,
        poll_interval_seconds=10.0,
        max_attempts=max_attempts,
        sleep=sleep,
    )
    return orchestrator, client, registry, sleep


def _recognize(orchestrator: OcrOrchestrator) -> str:
    return asyncio.run(
        orchestrator.recognize("doc-1", Path("/tmp/a.pdf"), "a.pdf", "application/pdf")
    )


class TestCompletion:
    def test_returns_text_on_second_poll(self) -> None:
        orchestrator, client, registry, sleep = _make_orchestrator(
            [in_progress(), complete("Acme LLC")]
        )

        text = _recognize(orchestrator)

        assert text == "Acme LLC"
        assert client.get_status.await_count == 2
        assert sleep.delays == [10.0, 10.0]
        job = registry.get("doc-1")
        assert job is not None
        assert job.provider_handle == "hash-1"
        assert job.poll_attempts == 2
        assert job.extracted_text == "Acme LLC"

    def test_polls_with_submission_handle(self) -> None:
        orchestrator, client, _registry, _sleep = _make_orchestrator([complete("x")])

        _recognize(orchestrator)

        client.submit.assert_awaited_once_with(Path("/tmp/a.pdf"), "a.pdf", "application/pdf")
        client.get_status.assert_awaited_once_with("hash-1")


class TestSubmissionFailure:
    def test_no_polling_after_rejected_submission(self) -> None:
        orchestrator, client, _registry, sleep = _make_orchestrator([])
        client.submit.side_effect = SubmissionError("quota exceeded")

        with pytest.raises(SubmissionError, match="quota exceeded"):
            _recognize(orchestrator)

        client.get_status.assert_not_awaited()
        assert sleep.delays == []


class TestProviderError:
    def test_short_circuits_on_first_poll(self) -> None:
        orchestrator, client, _registry, _sleep = _make_orchestrator(
            [provider_error("Unsupported file format")]
        )

        with pytest.raises(ProviderReportedError, match="Unsupported file format"):
            _recognize(orchestrator)

        assert client.get_status.await_count == 1

    def test_default_message_when_provider_gives_none(self) -> None:
        orchestrator, _client, _registry, _sleep = _make_orchestrator([provider_error("")])

        with pytest.raises(ProviderReportedError, match="Error processing document"):
            _recognize(orchestrator)


class TestTimeout:
    def test_gives_up_after_max_attempts(self) -> None:
        orchestrator, client, registry, sleep = _make_orchestrator([in_progress()] * 20)

        with pytest.raises(OcrTimeoutError, match="timed out after 20 attempts"):
            _recognize(orchestrator)

        assert client.get_status.await_count == 20
        assert len(sleep.delays) == 20
        assert all(delay >= 10.0 for delay in sleep.delays)
        job = registry.get("doc-1")
        assert job is not None
        assert job.poll_attempts == 20

    def test_timeout_is_not_a_provider_error(self) -> None:
        orchestrator, _client, _registry, _sleep = _make_orchestrator(
            [in_progress()] * 3, max_attempts=3
        )

        with pytest.raises(OcrTimeoutError) as exc_info:
            _recognize(orchestrator)

        assert not isinstance(exc_info.value, ProviderReportedError)


class TestTransientFailures:
    def test_retries_after_transient_failure(self) -> None:
        orchestrator, client, _registry, _sleep = _make_orchestrator(
            [TransientPollError("connection reset"), complete("text")]
        )

        assert _recognize(orchestrator) == "text"
        assert client.get_status.await_count == 2

    def test_transient_failure_on_last_attempt_escalates(self) -> None:
        orchestrator, client, _registry, _sleep = _make_orchestrator(
            [in_progress(), in_progress(), TransientPollError("read timeout")],
            max_attempts=3,
        )

        with pytest.raises(TransientPollError, match="read timeout"):
            _recognize(orchestrator)

        assert client.get_status.await_count == 3


class TestConstruction:
    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            OcrOrchestrator(MagicMock(), JobRegistry(), max_attempts=0)
