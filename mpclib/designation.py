"""
MPC packed designation codec.

Converts between human-readable minor planet, comet and natural satellite
designations and the fixed-width packed form used in columns 1-12 of MPC
80-column astrometry and in MPCORB-style orbit files.

Packed layouts (reference: https://www.minorplanetcenter.net/iau/info/PackedDes.html):

    Category  Unpacked             Packed      Layout
    --------  -------------------  ----------  ---------------------------------
    1         (433)                00433       5 decimal digits
    1         (164060)             G4060       base-62 digit + 4 decimals
    1         (620036)             ~000a       '~' + 4 base-62 digits (n - 620000)
    0         1995 XA              J95X00A     century, year, half-month, cycle, order
    0         2026 CA620           _QC0000     '_', year-2000, half-month, 4 base-62 digits
    0         2040 P-L             PLS2040     survey prefix + 4 decimals
    2         C/1995 O1            CJ95O010    comet type + provisional (fragment or '0')
    3         P/41                 0041P       4 decimals + comet type (+ fragment)
    4         S/2003 J 2           SK03J020    'S' + year + planet + number + '0'
    5         Jupiter XIII         J013S       planet + 3 decimals + 'S'
    6         1992-044A            1992-044A   COSPAR identifier, passed through
    -1        WT1190F              WT1190F     unrecognized token, passed through

Category 5 is deliberately lossy: "Neptune 210" and "Neptune CCX" both pack
to N210S, which always unpacks to the Roman numeral form.

Usage:
    from mpclib.designation import pack, unpack

    pack("1995 XA")                 # 'J95X00A'
    pack("9496058", category_hint=-1)  # '9496058'
    unpack("~000a")                 # ('(620036)', <Category.NUMBERED: 1>)
"""

import logging
import re
from dataclasses import dataclass
from enum import IntEnum

from mpclib import base62
from mpclib.errors import (
    OutOfRange,
    UnrecognizedDesignation,
    UnrecognizedPackedForm,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HALF_MONTH_LETTERS = "ABCDEFGHJKLMNOPQRSTUVWXY"
ORDER_LETTERS = "ABCDEFGHJKLMNOPQRSTUVWXYZ"
COMET_TYPES = "PCDXAI"

SURVEY_PREFIXES = {"P-L": "PLS", "T-1": "T1S", "T-2": "T2S", "T-3": "T3S"}
_SURVEY_IDS = {v: k for k, v in SURVEY_PREFIXES.items()}

PLANET_NAMES = {
    "E": "Earth",
    "M": "Mars",
    "J": "Jupiter",
    "S": "Saturn",
    "U": "Uranus",
    "N": "Neptune",
    "P": "Pluto",
}
_PLANET_LETTERS = {v: k for k, v in PLANET_NAMES.items()}

TILDE_BASE = 620000
MAX_NUMBERED = TILDE_BASE + base62.BASE ** 4 - 1     # 15396335, '~zzzz'
MAX_CYCLE = 619                                      # 'z9'
EXTENDED_CYCLE_START = 620
EXTENDED_FIRST_YEAR = 2000
EXTENDED_LAST_YEAR = EXTENDED_FIRST_YEAR + base62.BASE - 1
MIN_YEAR = 1000                                      # century digit 'A'
MAX_YEAR = (base62.BASE - 1) * 100 + 99              # century digit 'z'
MAX_FOUR_DIGIT = 9999
MAX_PERMANENT_SATELLITE = 999


class Category(IntEnum):
    """Designation categories, numbered as in the designation test corpus."""

    UNRECOGNIZED = -1
    PROVISIONAL = 0
    NUMBERED = 1
    COMET_PROVISIONAL = 2
    COMET_NUMBERED = 3
    SATELLITE = 4
    PERMANENT_SATELLITE = 5
    OPAQUE = 6


# ---------------------------------------------------------------------------
# Shared field encoders
# ---------------------------------------------------------------------------

def _pack_year(year):
    """1995 -> 'J95'."""
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise OutOfRange(f"Year {year} outside packable range "
                         f"{MIN_YEAR}-{MAX_YEAR}")
    return base62.digit_char(year // 100) + f"{year % 100:02d}"


def _unpack_year(field):
    return base62.digit_value(field[0]) * 100 + int(field[1:3])


def _pack_cycle(count):
    """Two-character cycle count: 0-99 as decimals, 100-619 as A0-z9."""
    if not 0 <= count <= MAX_CYCLE:
        raise OutOfRange(f"Cycle count {count} outside 0-{MAX_CYCLE}")
    tens, ones = divmod(count, 10)
    return base62.digit_char(tens) + str(ones)


def _unpack_cycle(field):
    return base62.digit_value(field[0]) * 10 + int(field[1])


def _pack_extended(year, half_month, order, cycle):
    """Extended provisional form for cycle counts of 620 and above.

    The four trailing base-62 digits hold (cycle - 620) * 25 plus the index
    of the order letter, so every order letter of a cycle is consecutive.
    """
    if not EXTENDED_FIRST_YEAR <= year <= EXTENDED_LAST_YEAR:
        raise OutOfRange(f"Year {year} outside extended provisional range "
                         f"{EXTENDED_FIRST_YEAR}-{EXTENDED_LAST_YEAR}")
    value = ((cycle - EXTENDED_CYCLE_START) * len(ORDER_LETTERS)
             + ORDER_LETTERS.index(order))
    return ("_" + base62.digit_char(year - EXTENDED_FIRST_YEAR)
            + half_month + base62.encode(value, 4))


def _unpack_extended(field):
    """'_QC0000' -> (2026, 'C', 'A', 620)."""
    year = EXTENDED_FIRST_YEAR + base62.digit_value(field[1])
    cycle, order_idx = divmod(base62.decode(field[3:7]), len(ORDER_LETTERS))
    return year, field[2], ORDER_LETTERS[order_idx], cycle + EXTENDED_CYCLE_START


def _check_range(value, low, high, what):
    if not low <= value <= high:
        raise OutOfRange(f"{what} {value} outside {low}-{high}")


# ---------------------------------------------------------------------------
# Roman numerals (permanent satellite designations)
# ---------------------------------------------------------------------------

_ROMAN_TOKENS = [
    (900, "CM"), (500, "D"), (400, "CD"), (100, "C"),
    (90, "XC"), (50, "L"), (40, "XL"), (10, "X"),
    (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
]
_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}


def to_roman(number):
    """Return the canonical Roman numeral for 1-999."""
    _check_range(number, 1, MAX_PERMANENT_SATELLITE, "Satellite number")
    out = []
    for value, token in _ROMAN_TOKENS:
        count, number = divmod(number, value)
        out.append(token * count)
    return "".join(out)


def from_roman(text):
    """Parse a canonical Roman numeral ('XXIV' -> 24).

    Non-canonical spellings such as 'IIII' or 'VX' are rejected so that
    every accepted numeral unpacks back to the same text.
    """
    if not text or any(ch not in _ROMAN_VALUES for ch in text):
        raise UnrecognizedDesignation(f"Not a Roman numeral: {text!r}")
    total = 0
    for i, ch in enumerate(text):
        value = _ROMAN_VALUES[ch]
        if i + 1 < len(text) and value < _ROMAN_VALUES[text[i + 1]]:
            total -= value
        else:
            total += value
    _check_range(total, 1, MAX_PERMANENT_SATELLITE, "Satellite number")
    if to_roman(total) != text:
        raise UnrecognizedDesignation(f"Non-canonical Roman numeral: {text!r}")
    return total


# ---------------------------------------------------------------------------
# Designation records, one per category
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NumberedMinorPlanet:
    number: int

    category = Category.NUMBERED

    def __str__(self):
        return f"({self.number})"

    def packed(self):
        n = self.number
        _check_range(n, 1, MAX_NUMBERED, "Minor planet number")
        if n < 100000:
            return f"{n:05d}"
        if n < TILDE_BASE:
            return base62.digit_char(n // 10000) + f"{n % 10000:04d}"
        return "~" + base62.encode(n - TILDE_BASE, 4)


@dataclass(frozen=True)
class ProvisionalDesignation:
    """Asteroid provisional designation such as 2007 TA418."""

    year: int
    half_month: str
    order: str
    cycle: int = 0

    category = Category.PROVISIONAL

    def __str__(self):
        suffix = str(self.cycle) if self.cycle else ""
        return f"{self.year} {self.half_month}{self.order}{suffix}"

    def packed(self):
        if self.cycle >= EXTENDED_CYCLE_START:
            return _pack_extended(self.year, self.half_month, self.order,
                                  self.cycle)
        return (_pack_year(self.year) + self.half_month
                + _pack_cycle(self.cycle) + self.order)


@dataclass(frozen=True)
class SurveyDesignation:
    """Palomar-Leiden and Trojan survey designations (2040 P-L, 3141 T-3)."""

    survey: str
    number: int

    category = Category.PROVISIONAL

    def __str__(self):
        return f"{self.number} {self.survey}"

    def packed(self):
        _check_range(self.number, 1, MAX_FOUR_DIGIT, "Survey number")
        return f"{SURVEY_PREFIXES[self.survey]}{self.number:04d}"


@dataclass(frozen=True)
class CometProvisional:
    """Comet provisional designation.

    Comet-style designations (C/1995 O1) have order=None and `number` is the
    sequence within the half-month; they may carry a fragment letter.
    Asteroid-style designations (P/2010 TO20) have an order letter and
    `number` is the cycle count.
    """

    comet_type: str
    year: int
    half_month: str
    number: int
    order: str = None
    fragment: str = None

    category = Category.COMET_PROVISIONAL

    def __str__(self):
        head = f"{self.comet_type}/{self.year} {self.half_month}"
        if self.order is not None:
            suffix = str(self.number) if self.number else ""
            return f"{head}{self.order}{suffix}"
        if self.fragment:
            return f"{head}{self.number}-{self.fragment}"
        return f"{head}{self.number}"

    def packed(self):
        if self.order is not None:
            return self.comet_type + ProvisionalDesignation(
                self.year, self.half_month, self.order, self.number).packed()
        _check_range(self.number, 1, MAX_CYCLE, "Comet number")
        tail = self.fragment.lower() if self.fragment else "0"
        return (self.comet_type + _pack_year(self.year) + self.half_month
                + _pack_cycle(self.number) + tail)


@dataclass(frozen=True)
class NumberedComet:
    comet_type: str
    number: int
    fragment: str = None

    category = Category.COMET_NUMBERED

    def __str__(self):
        if self.fragment:
            return f"{self.comet_type}/{self.number}-{self.fragment}"
        return f"{self.comet_type}/{self.number}"

    def packed(self):
        _check_range(self.number, 1, MAX_FOUR_DIGIT, "Comet number")
        tail = self.fragment.lower() if self.fragment else ""
        return f"{self.number:04d}{self.comet_type}{tail}"


@dataclass(frozen=True)
class SatelliteProvisional:
    """Natural satellite provisional designation such as S/2003 J 2."""

    planet: str
    year: int
    number: int

    category = Category.SATELLITE

    def __str__(self):
        return f"S/{self.year} {self.planet} {self.number}"

    def packed(self):
        _check_range(self.number, 1, MAX_CYCLE, "Satellite number")
        return ("S" + _pack_year(self.year) + self.planet
                + _pack_cycle(self.number) + "0")


@dataclass(frozen=True)
class PermanentSatellite:
    planet: str
    number: int

    category = Category.PERMANENT_SATELLITE

    def __str__(self):
        return f"{PLANET_NAMES[self.planet]} {to_roman(self.number)}"

    def packed(self):
        _check_range(self.number, 1, MAX_PERMANENT_SATELLITE,
                     "Satellite number")
        return f"{self.planet}{self.number:03d}S"


@dataclass(frozen=True)
class OpaqueDesignation:
    """Identifier outside the packed scheme; packs and unpacks to itself."""

    text: str
    category: Category = Category.UNRECOGNIZED

    def __str__(self):
        return self.text

    def packed(self):
        return self.text


# ---------------------------------------------------------------------------
# Unpacked text -> record
# ---------------------------------------------------------------------------

_NUMBERED_RE = re.compile(r"^\((\d+)\)$|^(\d+)$")
_PROVISIONAL_RE = re.compile(r"^(\d{4}) ([A-HJ-Y])([A-HJ-Z])([1-9]\d*)?$")
_SURVEY_RE = re.compile(r"^([1-9]\d*) (P-L|T-[123])$")
_COMET_PROVISIONAL_RE = re.compile(
    r"^([PCDXAI])/(\d{4}) ([A-HJ-Y])"
    r"(?:([1-9]\d*)(?:-([A-Z]))?|([A-HJ-Z])([1-9]\d*)?)$")
_COMET_NUMBERED_RE = re.compile(
    r"^(?:([PCDXAI])/([1-9]\d*)|([1-9]\d*)([PCDXAI]))(?:-([A-Z]{1,2}))?$")
_SATELLITE_RE = re.compile(r"^S/(\d{4}) ([EMJSUNP]) ([1-9]\d*)$")
_PERMANENT_SATELLITE_RE = re.compile(
    r"^(Earth|Mars|Jupiter|Saturn|Uranus|Neptune|Pluto) "
    r"([IVXLCDM]+|[1-9]\d*)$")
_COSPAR_RE = re.compile(r"^\d{4}-\d{3}[A-Z]{1,3}$")
_TOKEN_RE = re.compile(r"^[0-9A-Za-z]+$")


def _parse_numbered(text):
    m = _NUMBERED_RE.match(text)
    if not m:
        return None
    return NumberedMinorPlanet(int(m.group(1) or m.group(2)))


def _parse_provisional(text):
    m = _SURVEY_RE.match(text)
    if m:
        return SurveyDesignation(m.group(2), int(m.group(1)))
    m = _PROVISIONAL_RE.match(text)
    if m:
        year, half_month, order, cycle = m.groups()
        return ProvisionalDesignation(int(year), half_month, order,
                                      int(cycle or 0))
    return None


def _parse_comet_provisional(text):
    m = _COMET_PROVISIONAL_RE.match(text)
    if not m:
        return None
    ctype, year, half_month, number, fragment, order, cycle = m.groups()
    if order:
        return CometProvisional(ctype, int(year), half_month,
                                int(cycle or 0), order=order)
    return CometProvisional(ctype, int(year), half_month, int(number),
                            fragment=fragment)


def _parse_comet_numbered(text):
    m = _COMET_NUMBERED_RE.match(text)
    if not m:
        return None
    ctype = m.group(1) or m.group(4)
    number = int(m.group(2) or m.group(3))
    return NumberedComet(ctype, number, m.group(5))


def _parse_satellite(text):
    m = _SATELLITE_RE.match(text)
    if not m:
        return None
    return SatelliteProvisional(m.group(2), int(m.group(1)), int(m.group(3)))


def _parse_permanent_satellite(text):
    m = _PERMANENT_SATELLITE_RE.match(text)
    if not m:
        return None
    numeral = m.group(2)
    number = int(numeral) if numeral.isdigit() else from_roman(numeral)
    return PermanentSatellite(_PLANET_LETTERS[m.group(1)], number)


def _parse_opaque(text):
    if _COSPAR_RE.match(text):
        return OpaqueDesignation(text, Category.OPAQUE)
    return None


def _parse_unrecognized(text):
    # Only tokens that unpack to themselves can pass through
    if _TOKEN_RE.match(text) and classify_packed(text) is Category.UNRECOGNIZED:
        return OpaqueDesignation(text)
    return None


_PARSERS = {
    Category.NUMBERED: _parse_numbered,
    Category.PROVISIONAL: _parse_provisional,
    Category.COMET_PROVISIONAL: _parse_comet_provisional,
    Category.COMET_NUMBERED: _parse_comet_numbered,
    Category.SATELLITE: _parse_satellite,
    Category.PERMANENT_SATELLITE: _parse_permanent_satellite,
    Category.OPAQUE: _parse_opaque,
}


def parse_designation(text, category_hint=None):
    """Parse an unpacked designation into its category record.

    Args:
        text: designation such as "1995 XA", "(433)" or "P/41".
        category_hint: optional corpus category code (-1..6).  When given,
            only that category's grammar is tried; -1 accepts any
            alphanumeric token that is not itself a packed layout.

    Returns:
        One of the designation record classes.

    Raises:
        UnrecognizedDesignation: text matches no grammar (or not the hinted one).
    """
    text = text.strip()
    if not text:
        raise UnrecognizedDesignation("Empty designation")

    if category_hint is not None:
        category = Category(category_hint)
        if category is Category.UNRECOGNIZED:
            parser = _parse_unrecognized
        else:
            parser = _PARSERS[category]
        record = parser(text)
        if record is None:
            raise UnrecognizedDesignation(
                f"{text!r} is not a valid {category.name.lower()} designation")
        return record

    for parser in _PARSERS.values():
        record = parser(text)
        if record is not None:
            return record
    record = _parse_unrecognized(text)
    if record is not None:
        logger.debug("Passing through unrecognized designation %r", text)
        return record
    raise UnrecognizedDesignation(f"Cannot parse designation: {text!r}")


# ---------------------------------------------------------------------------
# Packed text -> record
# ---------------------------------------------------------------------------

_PACKED_CHARS_RE = re.compile(r"^[0-9A-Za-z~_-]+$")
_TILDE_PACKED_RE = re.compile(r"^~[0-9A-Za-z]{4}$")
_EXTENDED_PACKED_RE = re.compile(r"^_[0-9A-Za-z][A-HJ-Y][0-9A-Za-z]{4}$")
_PROVISIONAL_PACKED_RE = re.compile(
    r"^[A-Za-z]\d\d[A-HJ-Y][0-9A-Za-z]\d[A-HJ-Z]$")
_COMET_NUMBERED_PACKED_RE = re.compile(r"^\d{4}[PCDXAI][a-z]{0,2}$")
_COMET_PROVISIONAL_PACKED_RE = re.compile(
    r"^[PCDXAI][A-Za-z]\d\d[A-HJ-Y][0-9A-Za-z]\d[0a-zA-HJ-Z]$")
_SATELLITE_PACKED_RE = re.compile(r"^S[A-Za-z]\d\d[EMJSUNP][0-9A-Za-z]\d0$")
_PERMANENT_SATELLITE_PACKED_RE = re.compile(r"^[EMJSUNP]\d{3}S$")
_NUMBERED_PACKED_RE = re.compile(r"^[0-9A-Za-z]\d{4}$")


def classify_packed(packed):
    """Return the Category of a packed designation from its layout alone.

    Layouts are distinguished by length and by fixed-position characters
    ('~' and '_' sentinels, trailing 'S' or comet type, leading comet type
    or 'S', survey prefix), so at most one layout can match.

    Raises:
        UnrecognizedPackedForm: empty, illegal characters, or a '~'/'_'
            sentinel that does not fit its layout.
    """
    p = packed.strip()
    if not p or not _PACKED_CHARS_RE.match(p):
        raise UnrecognizedPackedForm(f"Cannot classify packed form: {packed!r}")

    if p[0] == "~":
        if _TILDE_PACKED_RE.match(p):
            return Category.NUMBERED
        raise UnrecognizedPackedForm(f"Malformed '~' number: {packed!r}")
    if p[0] == "_":
        if _EXTENDED_PACKED_RE.match(p):
            return Category.PROVISIONAL
        raise UnrecognizedPackedForm(
            f"Malformed extended provisional designation: {packed!r}")

    n = len(p)
    if n == 5:
        if _PERMANENT_SATELLITE_PACKED_RE.match(p):
            return Category.PERMANENT_SATELLITE
        if _NUMBERED_PACKED_RE.match(p):
            return Category.NUMBERED
    if 5 <= n <= 7 and _COMET_NUMBERED_PACKED_RE.match(p):
        return Category.COMET_NUMBERED
    if n == 7:
        if p[:3] in _SURVEY_IDS and p[3:].isdigit():
            return Category.PROVISIONAL
        if _PROVISIONAL_PACKED_RE.match(p):
            return Category.PROVISIONAL
    if n == 8:
        if _SATELLITE_PACKED_RE.match(p):
            return Category.SATELLITE
        if p[0] in COMET_TYPES and (_COMET_PROVISIONAL_PACKED_RE.match(p)
                                    or _EXTENDED_PACKED_RE.match(p[1:])):
            return Category.COMET_PROVISIONAL
    if _COSPAR_RE.match(p):
        return Category.OPAQUE
    if _TOKEN_RE.match(p):
        return Category.UNRECOGNIZED
    raise UnrecognizedPackedForm(f"Cannot classify packed form: {packed!r}")


def _provisional_from_packed(p):
    if p[0] == "_":
        year, half_month, order, cycle = _unpack_extended(p)
        return ProvisionalDesignation(year, half_month, order, cycle)
    return ProvisionalDesignation(_unpack_year(p[0:3]), p[3], p[6],
                                  _unpack_cycle(p[4:6]))


def _record_from_packed(p, category):
    if category is Category.NUMBERED:
        if p[0] == "~":
            return NumberedMinorPlanet(TILDE_BASE + base62.decode(p[1:]))
        return NumberedMinorPlanet(base62.digit_value(p[0]) * 10000
                                   + int(p[1:]))

    if category is Category.PROVISIONAL:
        if p[:3] in _SURVEY_IDS:
            return SurveyDesignation(_SURVEY_IDS[p[:3]], int(p[3:]))
        return _provisional_from_packed(p)

    if category is Category.COMET_NUMBERED:
        fragment = p[5:].upper() or None
        return NumberedComet(p[4], int(p[:4]), fragment)

    if category is Category.COMET_PROVISIONAL:
        ctype, body = p[0], p[1:]
        if body[0] == "_" or body[6].isupper():
            base = _provisional_from_packed(body)
            return CometProvisional(ctype, base.year, base.half_month,
                                    base.cycle, order=base.order)
        fragment = body[6].upper() if body[6] != "0" else None
        return CometProvisional(ctype, _unpack_year(body[0:3]), body[3],
                                _unpack_cycle(body[4:6]), fragment=fragment)

    if category is Category.SATELLITE:
        return SatelliteProvisional(p[4], _unpack_year(p[1:4]),
                                    _unpack_cycle(p[5:7]))

    if category is Category.PERMANENT_SATELLITE:
        return PermanentSatellite(p[0], int(p[1:4]))

    return OpaqueDesignation(p, category)


def from_packed(packed):
    """Decode a packed designation into its category record.

    Raises:
        UnrecognizedPackedForm: layout unknown, or a field holds a value no
            designation can have (e.g. number zero).
    """
    p = packed.strip()
    category = classify_packed(p)
    record = _record_from_packed(p, category)
    try:
        if record.packed() != p:
            raise UnrecognizedPackedForm(
                f"Packed form {packed!r} is not canonical")
    except OutOfRange as e:
        raise UnrecognizedPackedForm(
            f"Packed form {packed!r} holds an invalid value: {e}") from None
    return record


def to_packed(record):
    """Encode a designation record in packed form."""
    return record.packed()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def pack(designation_text, category_hint=None):
    """Pack a human-readable designation.

    Examples:
        >>> pack("1995 XA")
        'J95X00A'
        >>> pack("(620000)")
        '~0000'
        >>> pack("S/2003 J 2", category_hint=4)
        'SK03J020'
        >>> pack("Neptune 210", category_hint=5)
        'N210S'

    Raises:
        UnrecognizedDesignation: text matches no grammar.
        OutOfRange: a field cannot be represented in packed form.
    """
    return to_packed(parse_designation(designation_text, category_hint))


def unpack(packed_text):
    """Unpack a packed designation.

    Returns:
        (designation_text, category) tuple; category is a Category, which
        compares equal to the plain corpus code.

    Examples:
        >>> unpack("J95X00A")
        ('1995 XA', <Category.PROVISIONAL: 0>)
        >>> unpack("N210S")
        ('Neptune CCX', <Category.PERMANENT_SATELLITE: 5>)

    Raises:
        UnrecognizedPackedForm: packed text matches no layout.
    """
    record = from_packed(packed_text)
    return str(record), record.category
