"""Shared fixtures for the engine tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

import pytest

HAS_PROC_FD = os.path.isdir("/proc/self/fd")


@pytest.fixture(autouse=True)
def isolate_cwd(tmp_path, monkeypatch):
    """Run every test inside its own temporary directory."""
    monkeypatch.chdir(tmp_path)
    yield


def open_fds() -> List[str]:
    return sorted(os.listdir("/proc/self/fd"))


def std_stream_ids() -> List[tuple]:
    """Identify what descriptors 0, 1 and 2 currently point at."""
    ids = []
    for fd in (0, 1, 2):
        st = os.fstat(fd)
        ids.append((st.st_dev, st.st_ino))
    return ids


def read(path: Path) -> str:
    return Path(path).read_text(encoding="utf-8")


needs_proc_fd = pytest.mark.skipif(not HAS_PROC_FD, reason="requires /proc/self/fd")
