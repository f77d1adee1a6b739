"""Configuration dataclass for critical sections.

``SectionConfig`` centralizes the tunables shared by every guard so they can
be overridden from the environment or built directly in code and tests.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from critical_section.core.constants import (
    BACKEND_AUTO,
    DEFAULT_MAX_PROCESS,
    DEFAULT_POLL_INTERVAL,
    LOCK_BACKEND_ENV,
    LOCK_DIR_ENV,
    POLL_INTERVAL_ENV,
)

logger = logging.getLogger(__name__)


def _default_lock_dir() -> Path:
    return Path(tempfile.gettempdir())


@dataclass
class SectionConfig:
    """Configuration for critical-section guards.

    Attributes:
        lock_dir: Directory holding slot files (default: system temp dir)
        poll_interval: Seconds between wait_access attempts (default: 0.1)
        backend: Lock backend name, "auto", "fcntl" or "msvcrt" (default: "auto")
        max_process: Default capacity for new guards (default: 1)
    """

    lock_dir: Path = field(default_factory=_default_lock_dir)
    poll_interval: float = DEFAULT_POLL_INTERVAL
    backend: str = BACKEND_AUTO
    max_process: int = DEFAULT_MAX_PROCESS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SectionConfig:
        """Create configuration from environment variables.

        Unset or blank variables keep their defaults. A malformed poll
        interval is logged and ignored.
        """
        env = os.environ if environ is None else environ
        config = cls()

        lock_dir = env.get(LOCK_DIR_ENV, "").strip()
        if lock_dir:
            config.lock_dir = Path(lock_dir).expanduser()

        poll_interval = env.get(POLL_INTERVAL_ENV, "").strip()
        if poll_interval:
            try:
                parsed = float(poll_interval)
            except ValueError:
                parsed = -1.0
            if math.isfinite(parsed) and parsed > 0:
                config.poll_interval = parsed
            else:
                logger.warning(
                    "Ignoring invalid %s=%r; using %ss",
                    POLL_INTERVAL_ENV,
                    poll_interval,
                    config.poll_interval,
                )

        backend = env.get(LOCK_BACKEND_ENV, "").strip().lower()
        if backend:
            config.backend = backend

        return config

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for diagnostics."""
        return {
            "lock_dir": str(self.lock_dir),
            "poll_interval": self.poll_interval,
            "backend": self.backend,
            "max_process": self.max_process,
        }
