"""Office workflow backend: task lifecycle engine and audit trail."""

__version__ = "1.0.0"
