"""Dump error taxonomy.

All three kinds collapse to the same failure sentinel at the boolean/None
boundary; the raising APIs expose them individually.
"""


class DumpError(Exception):
    """Base class for window dump failures."""

    reason = "unknown"


class DumpIOError(DumpError):
    """Stream missing, unreadable/unwritable, or a short read/write."""

    reason = "io"


class DumpFormatError(DumpError):
    """Marker or version mismatch, or a malformed window on write."""

    reason = "format"


class DumpAllocationError(DumpError):
    """A reconstruction allocation step failed."""

    reason = "alloc"
