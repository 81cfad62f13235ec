"""Control API for blinders.

Public API:
    create_app -- Build the FastAPI app bound to a SessionEngine
"""

from blinders.api.server import create_app

__all__ = ["create_app"]
