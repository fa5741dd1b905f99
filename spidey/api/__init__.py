"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from spidey.api import app

    uvicorn spidey.api:app
"""

from spidey.api.app import app

__all__ = ["app"]
