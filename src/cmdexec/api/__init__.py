"""
Expose the FastAPI application instance.

Importing this module will create a FastAPI application and register
all routes.  Serve it with any ASGI server, for example:

```sh
uvicorn cmdexec.api:app --port 8080
```
"""

from .main import app

__all__ = ["app"]
