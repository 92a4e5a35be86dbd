import argparse
import asyncio
import mimetypes
from pathlib import Path

from docpipe.config.settings import Settings
from docpipe.database.connection import close_pool, init_pool
from docpipe.jobs.registry import JobRegistry
from docpipe.logging.logger import Log
from docpipe.processor.exceptions import ValidationError
from docpipe.processor.processor import build_processor
from docpipe.worker.job_runner import JobRunner


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract company information from a document into a user profile."
    )
    parser.add_argument("file", type=Path, help="Document to process")
    parser.add_argument("--owner-id", type=int, required=True, help="Owning user id")
    parser.add_argument("--mime-type", help="Declared MIME type (guessed from the name if omitted)")
    return parser.parse_args(argv)


async def run(settings: Settings, file: Path, owner_id: int, mime_type: str) -> str:
    """Submit one file, run it to a terminal state and return its final status."""
    use_db = settings.storage_backend.lower() == "postgres"
    if use_db:
        await init_pool(settings)
    registry = JobRegistry(settings.job_retention_seconds)
    processor = build_processor(settings, registry=registry)
    try:
        raw_bytes = await asyncio.to_thread(file.read_bytes)
        document_id = await processor.submit(raw_bytes, file.name, mime_type, owner_id)
        runner = JobRunner(processor, registry)
        runner.start(document_id)
        await runner.drain()
        job = processor.get_status(document_id)
        if job is None:
            return "unknown"
        if job.message:
            Log.info(f"Document {document_id}: {job.message}")
        return job.status.value
    finally:
        await processor.aclose()
        if use_db:
            await close_pool()


def main(argv: list[str] | None = None) -> None:
    """Entry point: load settings -> build dependencies -> process one document."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    mime_type = args.mime_type or mimetypes.guess_type(args.file.name)[0] or ""
    try:
        status = asyncio.run(run(settings, args.file, args.owner_id, mime_type))
    except ValidationError as exc:
        Log.error(f"Document rejected: {exc}")
        raise SystemExit(f"error: {exc}") from exc
    print(status)


if __name__ == "__main__":
    main()
