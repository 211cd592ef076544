"""HTTP middleware: request ID, actor context, audit capture.

Applied in main app; order matters (first added = outermost).
Import and use from officeflow.main.
"""

from officeflow.middleware.actor_context import ActorContextMiddleware
from officeflow.middleware.audit_capture import AuditCaptureMiddleware
from officeflow.middleware.request_id import RequestIDMiddleware
from officeflow.middleware.response_capture import ResponseCapture

__all__ = [
    "ActorContextMiddleware",
    "AuditCaptureMiddleware",
    "RequestIDMiddleware",
    "ResponseCapture",
]
