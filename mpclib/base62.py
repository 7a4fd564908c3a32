"""
Base-62 digits used throughout MPC packed designations.

The digit alphabet is 0-9, A-Z, a-z with values 0-61.  The same
fixed-width place-value routine encodes the ``~`` numbered-object
extension, the extended (``_``) provisional designations, century
characters and the high digit of cycle counts.

Usage:
    from mpclib import base62

    base62.encode(36, 4)      # '000a'
    base62.decode("AZaz")     # 2520113
"""

from mpclib.errors import OutOfRange

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
BASE = len(ALPHABET)

_VALUES = {c: i for i, c in enumerate(ALPHABET)}


def digit_value(ch):
    """Return the value (0-61) of a single base-62 digit."""
    try:
        return _VALUES[ch]
    except KeyError:
        raise ValueError(f"Invalid base-62 digit: {ch!r}") from None


def digit_char(value):
    """Return the base-62 digit for a value in 0-61."""
    if not 0 <= value < BASE:
        raise OutOfRange(f"{value} does not fit in one base-62 digit")
    return ALPHABET[value]


def encode(value, width):
    """Encode a non-negative integer as exactly `width` base-62 digits.

    Args:
        value: integer in [0, 62**width).
        width: number of output characters.

    Returns:
        Zero-padded base-62 string, most significant digit first.

    Raises:
        OutOfRange: value is negative or needs more than `width` digits.
    """
    if value < 0 or value >= BASE ** width:
        raise OutOfRange(f"{value} does not fit in {width} base-62 digits")
    digits = []
    for _ in range(width):
        value, rem = divmod(value, BASE)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def decode(text):
    """Decode a string of base-62 digits to an integer."""
    if not text:
        raise ValueError("Empty base-62 string")
    value = 0
    for ch in text:
        value = value * BASE + digit_value(ch)
    return value
