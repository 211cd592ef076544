"""Document lookup. Implements IDocumentLookup over incoming_documents."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.infrastructure.persistence.models.document import IncomingDocument


class DocumentRepository:
    """Existence checks for task links; create_incoming serves seeding scripts and tests."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def document_exists(self, document_id: int) -> bool:
        result = await self.db.execute(
            select(IncomingDocument.id).where(IncomingDocument.id == document_id)
        )
        return result.scalar_one_or_none() is not None

    async def create_incoming(
        self, document_number: str, summary: str, created_by_id: int | None = None
    ) -> int:
        row = IncomingDocument(
            document_number=document_number,
            summary=summary,
            created_by_id=created_by_id,
        )
        self.db.add(row)
        await self.db.flush()
        return row.id
