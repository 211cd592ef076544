"""Audit service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.application.services.audit_service import AuditService
from officeflow.core.config import Settings, get_settings
from officeflow.infrastructure.persistence.database import get_db, get_db_transactional
from officeflow.infrastructure.persistence.repositories import AuditLogRepository


def build_audit_service(db: AsyncSession, settings: Settings) -> AuditService:
    return AuditService(
        AuditLogRepository(db),
        export_max_rows=settings.audit_export_max_rows,
        report_window_days=settings.audit_report_window_days,
        default_page_size=settings.audit_page_size_default,
        max_page_size=settings.audit_page_size_max,
    )


async def get_audit_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditService:
    """Audit read path (queries, reports, export)."""
    return build_audit_service(db, get_settings())


async def get_audit_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> AuditService:
    """Audit service in a transaction (retention cleanup and its own audit row)."""
    return build_audit_service(db, get_settings())
