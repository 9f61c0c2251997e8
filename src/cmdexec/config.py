"""Configuration loader.

The HTTP service reads its configuration from environment variables so the
same installation can run under different process managers.  Reasonable
defaults are provided so that local development works out of the box.
The execution engine itself takes no configuration.

Environment variables:

``CMDEXEC_API_KEY``
    The shared secret used to authenticate incoming requests.  Clients must
    include this value in the ``x‑api‑key`` header.  When empty,
    authentication is skipped.

``CMDEXEC_WORK_PATH``
    Base directory under which each request gets its own temporary working
    directory.  Defaults to ``/tmp/cmdexec``.

``CMDEXEC_LOG_LEVEL``
    Level of the ``cmdexec`` logger.  One of ``DEBUG``, ``INFO``,
    ``WARNING``, ``ERROR`` or ``CRITICAL``.  Defaults to ``INFO``.

``PORT``
    The port on which the API server listens.  Defaults to 8080.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Centralised configuration object."""

    api_key: str
    work_path: str
    log_level: str
    port: int

    @classmethod
    def load(cls) -> "Config":
        # API key may be empty in local development but should be set in production.
        api_key = os.getenv("CMDEXEC_API_KEY", "")

        work_path = os.getenv("CMDEXEC_WORK_PATH", "/tmp/cmdexec")

        log_level = os.getenv("CMDEXEC_LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid CMDEXEC_LOG_LEVEL: {log_level}. Use one of {', '.join(LOG_LEVELS)}."
            )

        def _int_var(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                raise ValueError(f"Invalid integer for {name}: {val}")

        port = _int_var("PORT", 8080)

        return cls(
            api_key=api_key,
            work_path=work_path,
            log_level=log_level,
            port=port,
        )

    @classmethod
    def from_env(cls) -> "Config":
        """
        Alternate constructor used by the API to load configuration.

        This wrapper calls :meth:`load` to construct the configuration.
        """
        return cls.load()
