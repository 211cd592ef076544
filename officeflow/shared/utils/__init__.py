"""Shared utilities (UTC time, parsing)."""
