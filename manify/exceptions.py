"""Package-specific exception types."""

from __future__ import annotations

EXCERPT_LENGTH = 40


def excerpt(fragment: str, limit: int = EXCERPT_LENGTH) -> str:
    """Shorten offending input for use in diagnostics.

    Examples:
        excerpt("x" * 100)  # first 40 characters followed by "..."
    """
    if len(fragment) <= limit:
        return repr(fragment)
    return repr(fragment[:limit]) + "..."


class ManifyError(Exception):
    """Base class for every fatal conversion error.

    None of these errors is recovered during a run; the command line turns
    them into a diagnostic and a non-zero exit status.
    """


class MalformedInputError(ManifyError, ValueError):
    """Raised when an expected structural marker is missing from the input.

    Args:
        reason: What was expected and not found.
        fragment: Input text being processed when the marker was missing.
    """

    def __init__(self, reason: str, fragment: str):
        self.reason = reason
        self.fragment = fragment
        super().__init__(f"{reason}: {excerpt(fragment)}")


class BufferOverflowError(ManifyError):
    """Raised when a block exceeds the configured buffer capacity.

    Args:
        operation: Name of the transform or buffer that overflowed.
        capacity: Capacity, in characters, that was exceeded.
        fragment: Input text that produced the oversized result.
    """

    def __init__(self, operation: str, capacity: int, fragment: str):
        self.operation = operation
        self.capacity = capacity
        self.fragment = fragment
        super().__init__(
            f"{operation} buffer of {capacity} characters too small for: {excerpt(fragment)}"
        )


class ResourceError(ManifyError):
    """Raised when an output directory or file cannot be created, opened, or closed.

    Args:
        message: Description of the failed operation.
        path: Filesystem path involved, when known.
    """

    def __init__(self, message: str, path: object = None):
        self.path = path
        super().__init__(message)


class PatternCompilationError(ManifyError):
    """Raised when the symbol-name pattern cannot be compiled.

    Args:
        pattern: Regular expression source that failed.
        reason: Message reported by the regular expression engine.
    """

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(f"Invalid symbol pattern {pattern!r}: {reason}")
