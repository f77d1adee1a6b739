"""Section identity helpers.

A section is known on disk only by the digest of its identifier, so any two
processes that agree on the identifier (and lock directory) share slots
without exchanging configuration.
"""

from __future__ import annotations

import hashlib
import inspect
import os
from pathlib import Path

from critical_section.core.constants import DIGEST_ALGORITHM


def section_digest(identifier: str) -> str:
    """Return the hex digest naming a section's slot files."""
    return hashlib.new(DIGEST_ALGORITHM, identifier.encode("utf-8"), usedforsecurity=False).hexdigest()


def caller_location(stacklevel: int = 1) -> str:
    """
    Describe a calling frame as ``"<absolute file path>:<line number>"``.

    Args:
        stacklevel: 1 is the caller of the function that calls this helper,
            2 its caller, and so on.

    The result is stable across process invocations as long as the source
    file does not move and the call stays on the same line.
    """
    if stacklevel < 1:
        raise ValueError("stacklevel must be >= 1")

    frame = inspect.currentframe()
    try:
        for _ in range(stacklevel + 1):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            raise RuntimeError("call stack is not deep enough to derive a section identifier")
        filename = os.path.realpath(frame.f_code.co_filename)
        return f"{filename}:{frame.f_lineno}"
    finally:
        del frame


def slot_file_path(lock_dir: Path, digest: str, slot: int) -> Path:
    """Build ``<lock_dir>/<digest>-<slot>``."""
    return Path(lock_dir) / f"{digest}-{slot}"
