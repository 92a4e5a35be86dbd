from datetime import datetime
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docpipe.database.connection import get_connection
from docpipe.database.exceptions import PersistenceError
from docpipe.database.repositories.base import BaseDocumentRepository
from docpipe.processor.exceptions import DocumentNotFoundError
from docpipe.processor.models import Document, DocumentStatus


class DocumentRepository(BaseDocumentRepository):
    """Database operations for the company_documents table."""

    async def create(self, document: Document) -> None:
        await self._execute(
            """
            INSERT INTO company_documents
            (id, user_id, file_name, file_type, file_path, file_size,
             status, uploaded_at)
            VALUES (%s::uuid, %s, %s, %s, %s, %s, %s, COALESCE(%s, NOW()))
            """,
            (
                document.id,
                document.owner_id,
                document.file_name,
                document.mime_type,
                document.storage_path,
                document.size_bytes,
                document.status.value,
                document.uploaded_at,
            ),
        )

    async def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
            PersistenceError: if the query fails.
        """
        try:
            async with get_connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        """
                        SELECT id, user_id, file_name, file_type, file_path, file_size,
                               status, extracted_text, extracted_data, error_message,
                               uploaded_at, processing_started_at, processing_completed_at
                        FROM company_documents
                        WHERE id = %s::uuid
                        """,
                        (document_id,),
                    )
                    row = await cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to load document {document_id}: {exc}") from exc

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        return Document(
            id=str(row["id"]),
            owner_id=row["user_id"],
            file_name=row["file_name"],
            mime_type=row["file_type"],
            storage_path=row["file_path"],
            size_bytes=row["file_size"],
            status=DocumentStatus(row["status"]),
            extracted_text=row["extracted_text"],
            extracted_data=row["extracted_data"],
            error_message=row["error_message"],
            uploaded_at=row["uploaded_at"],
            processing_started_at=row["processing_started_at"],
            processing_completed_at=row["processing_completed_at"],
        )

    async def mark_processing(self, document_id: str, started_at: datetime) -> None:
        await self._execute(
            """
            UPDATE company_documents
            SET status = 'processing', processing_started_at = %s
            WHERE id = %s::uuid
            """,
            (started_at, document_id),
        )

    async def mark_completed(
        self,
        document_id: str,
        extracted_text: str,
        extracted_data: dict[str, Any],
        completed_at: datetime,
    ) -> None:
        await self._execute(
            """
            UPDATE company_documents
            SET status = 'completed', extracted_text = %s, extracted_data = %s,
                processing_completed_at = %s
            WHERE id = %s::uuid
            """,
            (extracted_text, Jsonb(extracted_data), completed_at, document_id),
        )

    async def mark_failed(
        self,
        document_id: str,
        error_message: str,
        completed_at: datetime,
    ) -> None:
        await self._execute(
            """
            UPDATE company_documents
            SET status = 'error', error_message = %s, processing_completed_at = %s
            WHERE id = %s::uuid
            """,
            (error_message, completed_at, document_id),
        )

    @staticmethod
    async def _execute(query: str, params: tuple[Any, ...]) -> None:
        try:
            async with get_connection() as conn:
                await conn.execute(query, params)
                await conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Document write failed: {exc}") from exc
