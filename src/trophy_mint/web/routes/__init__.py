"""Route handlers for the HTTP API."""

from trophy_mint.web.routes import achievements, library, metadata, session

__all__ = ["achievements", "library", "metadata", "session"]
