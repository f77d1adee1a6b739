"""Critical section guard limiting how many processes may enter a code region."""

from __future__ import annotations

import contextlib
import logging
import math
import time
from collections.abc import Iterator
from pathlib import Path

from critical_section.core.config import SectionConfig
from critical_section.core.constants import WAIT_FOREVER
from critical_section.core.exceptions import (
    CriticalSectionClosedError,
    SlotOutOfRangeError,
    WaitTimeoutError,
)
from critical_section.core.locks.backends import LockBackend, SlotHandle
from critical_section.core.locks.identity import caller_location, section_digest, slot_file_path
from critical_section.core.locks.manager import create_lock_backend
from critical_section.core.logging import with_log_context


class CriticalSection:
    """Cross-process guard allowing at most ``max_process`` simultaneous holders.

    Each of the ``max_process`` slots is an empty marker file
    ``<lock_dir>/<digest>-<slot>`` locked with an exclusive advisory lock.
    Slot files are created on first use and never deleted.

    Usage:
        with CriticalSection("nightly-import") as cs:
            if not cs.has_access():
                print("There are other processes executing...")
                return
            # ... protected work ...

        with CriticalSection() as cs:  # identifier derived from this line
            cs.wait_access(timeout=30)
            # ... protected work ...

    Args:
        section_id: Logical section identifier. Defaults to the caller's
            source location, so one call site maps to one section.
        max_process: Maximum number of simultaneous holders (default: 1)
        lock_dir: Directory for slot files. Defaults to the system temp dir.
        poll_interval: Seconds between wait_access attempts (default: 0.1)
        backend_name: Optional backend override ("auto", "fcntl", "msvcrt")
        logger: Logger for diagnostics
        config: Base configuration; explicit arguments take precedence
        stacklevel: Frames above the constructor to use for a derived identifier
    """

    def __init__(
        self,
        section_id: str | None = None,
        max_process: int | None = None,
        *,
        lock_dir: Path | str | None = None,
        poll_interval: float | None = None,
        backend_name: str | None = None,
        logger: logging.Logger | None = None,
        config: SectionConfig | None = None,
        stacklevel: int = 1,
    ):
        config = config or SectionConfig.from_env()

        if not section_id:
            section_id = caller_location(stacklevel)

        if max_process is None:
            max_process = config.max_process
        if isinstance(max_process, bool) or not isinstance(max_process, int) or max_process < 1:
            raise ValueError(f"max_process must be a positive integer, got {max_process!r}")

        if poll_interval is None:
            poll_interval = config.poll_interval
        if not math.isfinite(poll_interval) or poll_interval <= 0:
            raise ValueError(f"poll_interval must be a positive finite number, got {poll_interval!r}")

        self._section_id = section_id
        self._digest = section_digest(section_id)
        self._max_process = max_process
        self._lock_dir = Path(lock_dir) if lock_dir is not None else Path(config.lock_dir)
        self.poll_interval = poll_interval

        base_logger = logger or logging.getLogger(__name__)
        self.logger = with_log_context(
            base_logger, section=self._digest, section_id=section_id, max_process=max_process
        )
        self.backend: LockBackend = create_lock_backend(backend_name or config.backend, logger=base_logger)

        # Only held slots have an entry; capacity can be large.
        self._handles: dict[int, SlotHandle] = {}
        self._closed = False

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(section_id={self._section_id!r}, max_process={self._max_process}, "
            f"held_slots={self.held_slots})"
        )

    @property
    def section_id(self) -> str:
        return self._section_id

    @property
    def digest(self) -> str:
        return self._digest

    @property
    def max_process(self) -> int:
        return self._max_process

    @property
    def lock_dir(self) -> Path:
        return self._lock_dir

    @property
    def held_slots(self) -> list[int]:
        return sorted(self._handles)

    @property
    def acquired(self) -> bool:
        return bool(self._handles)

    @property
    def closed(self) -> bool:
        return self._closed

    def slot_path(self, slot: int) -> Path:
        """Path of the marker file backing ``slot``."""
        self._check_range(slot)
        return slot_file_path(self._lock_dir, self._digest, slot)

    def has_access(self) -> bool:
        """Try to take a free slot without blocking.

        Slots are probed in ascending order and the first one locked is kept
        until the guard is closed.

        Returns:
            True if a slot is held, False if every slot is busy.

        Raises:
            SlotFileError: A slot file cannot be created or opened.
            CriticalSectionClosedError: The guard was already closed.
        """
        self._ensure_open()

        for slot in range(self._max_process):
            if self.check(slot):
                return True

        self.logger.debug("All %d slot(s) busy", self._max_process)
        return False

    def wait_access(self, timeout: float = WAIT_FOREVER) -> None:
        """Poll ``has_access`` until a slot is held.

        Args:
            timeout: Maximum waiting time in seconds; negative waits forever.

        Raises:
            WaitTimeoutError: No slot became free within ``timeout``.
        """
        if math.isnan(timeout):
            raise ValueError("timeout must be a number, got NaN")

        deadline = None if timeout < 0 else time.monotonic() + timeout
        attempts = 0

        while True:
            attempts += 1
            if self.has_access():
                if attempts > 1:
                    self.logger.debug("Access granted after %d attempts", attempts)
                return

            if deadline is None:
                time.sleep(self.poll_interval)
                continue

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.logger.warning("Timed out after %ss waiting for access (%d attempts)", timeout, attempts)
                raise WaitTimeoutError(timeout, attempts=attempts, section=self._digest)
            time.sleep(min(self.poll_interval, remaining))

    def check(self, slot: int) -> bool:
        """Try locking one slot without blocking.

        Re-checking a slot this guard already holds reports True and keeps
        the existing handle.

        Raises:
            SlotOutOfRangeError: ``slot`` is outside ``0..max_process-1``.
            SlotFileError: The slot file cannot be created or opened.
            CriticalSectionClosedError: The guard was already closed.
        """
        self._check_range(slot)
        self._ensure_open()

        if slot in self._handles:
            return True

        slot_path = slot_file_path(self._lock_dir, self._digest, slot)
        handle = self.backend.acquire(slot_path)
        if handle is None:
            self.logger.debug("Slot %d busy: %s", slot, slot_path)
            return False

        self._handles[slot] = handle
        self.logger.debug("Slot %d acquired: %s", slot, slot_path)
        return True

    def close(self) -> None:
        """Release every held slot. Safe to call more than once."""
        for slot, handle in list(self._handles.items()):
            del self._handles[slot]
            self.backend.release(handle)
            self.logger.debug("Slot %d released", slot)
        self._closed = True

    release = close

    def __enter__(self) -> CriticalSection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        # Interpreter shutdown or a failed __init__ may leave attributes missing.
        handles = getattr(self, "_handles", None)
        backend = getattr(self, "backend", None)
        if not handles or backend is None:
            return
        for handle in list(handles.values()):
            with contextlib.suppress(Exception):
                backend.release(handle)
        handles.clear()

    def _ensure_open(self) -> None:
        if self._closed:
            raise CriticalSectionClosedError("Critical section is closed", f"section {self._digest}")

    def _check_range(self, slot: int) -> None:
        if not 0 <= slot < self._max_process:
            raise SlotOutOfRangeError(slot, self._max_process)


def critical_section(
    section_id: str | None = None,
    max_process: int | None = None,
    timeout: float = WAIT_FOREVER,
    **kwargs,
) -> contextlib.AbstractContextManager[CriticalSection]:
    """Wait for access to a section and hold it for the ``with`` block.

    Usage:
        with critical_section("reindex", timeout=10):
            ...

    Without ``section_id`` the identifier is derived from the line calling
    this function. Raises ``WaitTimeoutError`` from the ``with`` statement
    if access is not granted in time.
    """
    if not section_id:
        section_id = caller_location()
    return _held_section(section_id, max_process, timeout, **kwargs)


@contextlib.contextmanager
def _held_section(
    section_id: str,
    max_process: int | None,
    timeout: float,
    **kwargs,
) -> Iterator[CriticalSection]:
    guard = CriticalSection(section_id, max_process, **kwargs)
    try:
        guard.wait_access(timeout)
        yield guard
    finally:
        guard.close()
