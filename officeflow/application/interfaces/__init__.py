"""Ports implemented by infrastructure."""
