"""Custom exceptions for critical-section.

Lock contention is never an exception: a busy slot is reported as a plain
``False`` from ``CriticalSection.has_access``. The classes below cover the
failure modes a caller has to react to.
"""


class CriticalSectionError(Exception):
    """Base exception for all critical-section errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class SlotFileError(CriticalSectionError):
    """Raised when a slot file cannot be created or opened.

    This is an environment problem, not contention.

    Examples:
        - Lock directory does not exist or is not writable
        - Disk full
        - Path points at a directory
    """

    def __init__(
        self,
        message: str,
        slot_path: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.slot_path = slot_path
        self.original_error = original_error
        super().__init__(message, details)


class SlotOutOfRangeError(CriticalSectionError, IndexError):
    """Raised when a slot index falls outside the section capacity."""

    def __init__(self, slot: int, max_process: int):
        self.slot = slot
        self.max_process = max_process
        super().__init__(
            "Slot number out of range",
            f"slot {slot} not in 0..{max_process - 1}",
        )


class WaitTimeoutError(CriticalSectionError, TimeoutError):
    """Raised when ``wait_access`` exceeds the maximum waiting time.

    Attributes:
        timeout: Requested maximum wait in seconds
        attempts: Number of acquisition attempts made before giving up
    """

    def __init__(self, timeout: float, attempts: int = 0, section: str | None = None):
        self.timeout = timeout
        self.attempts = attempts
        self.section = section

        details_parts = [f"timeout {timeout:g}s"]
        if attempts:
            details_parts.append(f"{attempts} attempts")
        if section:
            details_parts.append(f"section {section}")
        super().__init__("Exceeded the maximum waiting time", ", ".join(details_parts))


class CriticalSectionClosedError(CriticalSectionError):
    """Raised when acquisition is attempted on a guard that was already closed."""

    pass


class LockBackendUnavailableError(OSError):
    """Raised when a backend exists but is unusable for the target lock path."""
