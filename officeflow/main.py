"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here. See officeflow.core.lifespan and
officeflow.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from officeflow.api.v1 import api_router
from officeflow.application.services.route_classifier import PathRouteClassifier
from officeflow.core.config import get_settings
from officeflow.core.exception_handlers import register_exception_handlers
from officeflow.core.lifespan import create_lifespan
from officeflow.middleware import (
    ActorContextMiddleware,
    AuditCaptureMiddleware,
    RequestIDMiddleware,
)


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    # Middleware: last added = outermost. Request ID → actor context → audit capture → CORS → routes.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        AuditCaptureMiddleware,
        classifier=PathRouteClassifier(),
        skip_paths=settings.audit_skip_path_list,
        max_body_bytes=settings.audit_capture_max_body_bytes,
    )
    app.add_middleware(ActorContextMiddleware)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
