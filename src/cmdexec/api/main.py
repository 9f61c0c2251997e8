"""
FastAPI application for the command execution service.

This module configures the FastAPI application, registers the routes for
running command trees and enforces authentication via an API key.  Every
request is evaluated in a forked worker inside its own temporary working
directory, so built-ins such as ``cd``, ``NAME=VALUE`` and ``exit`` only
affect that worker and never the server process.

The worker is forked from inside the request handler and the handler blocks
until it exits, as any other blocking executor call would.  The server
process is multi-threaded (uvicorn, or the TestClient portal), so Python
3.12 and later emit a ``DeprecationWarning`` about ``fork()`` for each
request.  The worker only evaluates the tree and leaves with
:func:`os._exit`; it never returns into the server's event loop.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ..config import Config
from ..executor import run_isolated
from ..log import configure_logging
from ..models import ExecuteRequest, ExecuteResponse


config = Config.from_env()

logger = configure_logging(config.log_level)

logger.info(
    "Loaded config: work_path=%s, log_level=%s, port=%s",
    config.work_path,
    config.log_level,
    config.port,
)

WORK_DIR_BASE = Path(config.work_path)
WORK_DIR_BASE.mkdir(parents=True, exist_ok=True)
try:
    WORK_DIR_BASE.chmod(0o777)
except PermissionError:
    logger.warning("Unable to chmod work dir %s; continuing", WORK_DIR_BASE)


app = FastAPI(title="Command Execution Service", version="0.1.0")


@app.middleware("http")
async def authenticate(request, call_next):
    """Middleware to enforce API key authentication on all requests."""
    path = request.url.path
    method = request.method
    client = getattr(request.client, "host", "unknown")

    logger.info("Incoming request: %s %s from %s", method, path, client)

    provided_key = request.headers.get("x-api-key")
    if config.api_key:
        if provided_key != config.api_key:
            logger.warning(
                "Invalid API key for %s %s from %s",
                method,
                path,
                client,
            )
            return JSONResponse(status_code=401, content={"detail": "Invalid API key"})
    else:
        logger.debug("No API key configured; skipping auth check")

    response = await call_next(request)
    logger.info("Response: %s %s -> %s", method, path, response.status_code)
    return response


@app.get("/health")
async def health() -> Dict[str, str]:
    """Return a simple health check response."""
    return {"status": "ok"}


@app.post("/exec", response_model=ExecuteResponse)
async def exec_command(req: ExecuteRequest) -> ExecuteResponse:
    """Evaluate a command tree in a fresh working directory."""
    node = req.command.to_node()

    try:
        with tempfile.TemporaryDirectory(dir=str(WORK_DIR_BASE)) as tmpdir:
            work_dir = Path(tmpdir)
            logger.info("[/exec] Running %s command in %s", req.command.kind, work_dir)

            result = run_isolated(node, work_dir, req.stdin)

            files: List[str] = sorted(
                p.name for p in work_dir.iterdir() if p.is_file() and not p.name.startswith(".")
            )

            logger.info(
                "[/exec] Execution finished: exit_code=%s, duration_ms=%s, files=%s",
                result.exit_code,
                result.duration_ms,
                files,
            )

            return ExecuteResponse(
                stdout=result.stdout,
                stderr=result.stderr,
                exit_code=result.exit_code,
                duration_ms=result.duration_ms,
                files=files,
            )
    except Exception as exc:
        logger.exception("[/exec] Unhandled error during execution: %s", exc)
        raise HTTPException(status_code=500, detail="Execution error")
