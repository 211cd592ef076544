"""DB session dependencies (composition root).

Read routes use get_db; mutating routes use get_db_transactional so the
task row and its status history row commit or roll back together. FastAPI
caches a dependency per request, so every repository built for one request
shares one session.
"""

from officeflow.infrastructure.persistence.database import get_db, get_db_transactional

__all__ = ["get_db", "get_db_transactional"]
