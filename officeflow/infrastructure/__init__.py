"""Infrastructure adapters: persistence and security."""
