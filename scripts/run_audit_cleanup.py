"""Run audit retention: delete audit rows older than N days (cron entry point).

Usage:
    python -m scripts.run_audit_cleanup [days]
days defaults to AUDIT_RETENTION_DEFAULT_DAYS and may not go below
AUDIT_RETENTION_MIN_DAYS.
"""

import asyncio
import sys

import officeflow.infrastructure.persistence.database as database
from officeflow.application.services.audit_service import AuditService
from officeflow.core.config import get_settings
from officeflow.infrastructure.persistence.repositories import AuditLogRepository
from officeflow.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Delete old audit rows in one transaction and print the count."""
    settings = get_settings()
    setup_logging()
    days = int(sys.argv[1]) if len(sys.argv) > 1 else settings.audit_retention_default_days
    if days < settings.audit_retention_min_days:
        print(
            f"days must be at least {settings.audit_retention_min_days}",
            file=sys.stderr,
        )
        sys.exit(1)

    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            deleted = await AuditService(AuditLogRepository(session)).cleanup(days)
    await database.dispose_engine()
    print(f"Done. Deleted {deleted} audit row(s) older than {days} days")


if __name__ == "__main__":
    asyncio.run(main())
