"""Cross-cutting helpers: request context, logging, time utilities."""
