"""API v1 endpoint modules: thin routes delegating to application services."""
