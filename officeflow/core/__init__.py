"""Core wiring: configuration, exception handlers, lifespan."""
