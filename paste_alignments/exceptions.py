"""
Exception types raised by the paste_alignments package.

All errors derive from PasteAlignmentsError so callers (and the command
line entry point) can catch every domain failure with a single clause.
"""


class PasteAlignmentsError(Exception):
    """Base class for all paste_alignments errors."""


class ParsingError(PasteAlignmentsError):
    """Malformed alignment fields (wrong count, non-digit numbers, bad spans)."""


class ScoringError(PasteAlignmentsError):
    """Unsupported scoring parameter set or invalid database size."""


class PastingError(PasteAlignmentsError):
    """Two alignments whose relative position does not allow a paste."""


class ReadError(PasteAlignmentsError):
    """Malformed input rows, or a read past the end of the data."""
