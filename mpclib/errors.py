"""
Exceptions raised by the designation codec.

All of them derive from ValueError, so callers that already guard field
parsing with ``except ValueError`` keep working.
"""


class DesignationError(ValueError):
    """Base class for designation packing/unpacking failures."""


class UnrecognizedDesignation(DesignationError):
    """Unpacked text matches no known designation grammar."""


class UnrecognizedPackedForm(DesignationError):
    """Packed text matches no known packed layout."""


class OutOfRange(DesignationError):
    """A number, cycle count or year cannot be represented in packed form."""
