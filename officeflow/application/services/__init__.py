"""Application services: audit write/read path and route classification."""

from officeflow.application.services.audit_service import AuditService
from officeflow.application.services.route_classifier import (
    IRouteClassifier,
    PathRouteClassifier,
    RouteClassification,
)

__all__ = [
    "AuditService",
    "IRouteClassifier",
    "PathRouteClassifier",
    "RouteClassification",
]
