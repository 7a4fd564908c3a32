"""
MPC 80-column record conversion utilities.

Splits and builds the designation field (columns 1-12) of 80-column
astrometry records, parses the observation header fields, and converts
whole pandas columns of designations between packed and unpacked form.

Reference:
  - MPC 80-column format: https://www.minorplanetcenter.net/iau/info/ObsFormat.html
  - Packed designations: https://www.minorplanetcenter.net/iau/info/PackedDes.html
"""

import pandas as pd

from mpclib.designation import Category, pack, parse_designation, unpack
from mpclib.errors import DesignationError


# ---------------------------------------------------------------------------
# Observation mode mapping: MPC col-15 code -> ADES mode
# ---------------------------------------------------------------------------
MPC_MODE_TO_ADES = {
    "C": "CCD",
    "B": "CMO",     # CMOS
    "V": "VID",
    "T": "TDI",
    "P": "PHO",
    "E": "ENC",
    "M": "MIC",
    "e": "PMT",     # encoder / photoelectric
    "O": "OCC",
    "A": "PHO",     # photographic (aperture corrected)
    "N": "PHO",     # photographic (normal astrograph)
    " ": "PHO",     # blank = photographic (historical default)
    "S": "CCD",     # satellite-based CCD
    "s": "CCD",     # satellite-based CCD (offset line)
    "X": "CCD",     # roving observer
    "x": "CCD",     # roving observer (second line)
}

# Categories whose packed form sits in columns 1-5 (permanent identifiers)
_PERMANENT = (Category.NUMBERED, Category.COMET_NUMBERED,
              Category.PERMANENT_SATELLITE)


# ---------------------------------------------------------------------------
# MPC date field -> ISO 8601 / Julian date
# ---------------------------------------------------------------------------
def _split_mpc_date(date_str):
    parts = date_str.split()
    if len(parts) != 3 or "." not in parts[2]:
        raise ValueError(f"Cannot parse MPC date: {date_str!r}")
    return int(parts[0]), int(parts[1]), parts[2]


def mpc_date_to_iso8601(date_str):
    """Convert MPC 80-column date field to ISO 8601 UTC.

    Args:
        date_str: 17-character string from obs80 positions 16-32,
                  e.g. "2024 12 27.238073"

    Returns:
        ISO 8601 string, e.g. "2024-12-27T05:42:49.5Z".  Each day decimal
        beyond the fifth adds one decimal to the seconds.
    """
    year, month, day_frac = _split_mpc_date(date_str)
    day_str, frac_str = day_frac.split(".")
    sec_decimals = max(len(frac_str) - 5, 0)

    total = round(float("0." + frac_str) * 86400.0, sec_decimals)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)

    if sec_decimals == 0:
        sec_str = f"{int(secs):02d}"
    else:
        sec_str = f"{secs:0{3 + sec_decimals}.{sec_decimals}f}"
    return (f"{year}-{month:02d}-{int(day_str):02d}"
            f"T{int(hours):02d}:{int(minutes):02d}:{sec_str}Z")


def mpc_date_to_jd(date_str):
    """Convert MPC 80-column date field to a Julian date (UTC, Gregorian).

    >>> mpc_date_to_jd("2000 01 01.5")
    2451545.0
    """
    year, month, day_frac = _split_mpc_date(date_str)
    day = float(day_frac)
    if month <= 2:
        year -= 1
        month += 12
    a = year // 100
    b = 2 - a + a // 4
    return (int(365.25 * (year + 4716)) + int(30.6001 * (month + 1))
            + day + b - 1524.5)


# ---------------------------------------------------------------------------
# Designation field (cols 1-12)
# ---------------------------------------------------------------------------
def split_obs80_designation(line):
    """Extract the packed designation from columns 1-12 of an obs80 record.

    Numbered objects, numbered comets and permanent satellites sit in
    columns 1-5 (numbered comet fragments in columns 11-12); comet and
    natural satellite provisional designations in columns 5-12; everything
    else in columns 6-12.

    Returns:
        Packed designation with padding removed ("" for a blank field).
    """
    field = line[:12].ljust(12)
    if not field[:4].strip() and field[4] != " ":
        return field[4:12].strip()
    number = field[:5].strip()
    if number:
        if number[-1].isalpha() and number[:-1].isdigit():
            return number + field[10:12].strip()
        return number
    return field[5:12].strip()


def obs80_designation_field(designation, category_hint=None):
    """Build the 12-column obs80 designation field for a designation.

    Raises:
        DesignationError: designation cannot be packed.
        ValueError: pass-through identifier longer than seven characters.
    """
    record = parse_designation(designation, category_hint)
    packed = record.packed()
    category = record.category

    if category == Category.COMET_NUMBERED:
        return packed[:5] + " " * 5 + packed[5:].rjust(2)
    if category in _PERMANENT:
        return packed.ljust(12)
    if len(packed) == 8:
        return "    " + packed
    if len(packed) > 7:
        raise ValueError(f"{designation!r} does not fit an obs80 field")
    return "     " + packed.ljust(7)


# ---------------------------------------------------------------------------
# Parse obs80 line into a dict of ADES-compatible fields
# ---------------------------------------------------------------------------
def parse_obs80(obs80):
    """Parse the identification and timing fields of an obs80 record.

    Returns:
        Dictionary with the packed designation ("packed"), its category,
        ADES identifier (permID, provID or trkSub), discovery flag, notes,
        mode, obsTime (ISO 8601), jd and stn.  Blank fields are omitted.

    Raises:
        UnrecognizedPackedForm: columns 1-12 hold no valid packed form.
    """
    line = obs80.rstrip("\n").ljust(80)
    result = {}

    packed = split_obs80_designation(line)
    if packed:
        unpacked, category = unpack(packed)
        result["packed"] = packed
        result["category"] = int(category)
        if category in _PERMANENT:
            result["permID"] = unpacked.strip("()")
        elif category in (Category.UNRECOGNIZED, Category.OPAQUE):
            result["trkSub"] = unpacked
        else:
            result["provID"] = unpacked

    disc = line[12]
    if disc in ("*", "+"):
        result["disc"] = disc

    col14 = line[13]
    if col14.isalpha():
        result["notes"] = col14

    result["mode"] = MPC_MODE_TO_ADES.get(line[14], "UNK")

    date_str = line[15:32]
    if date_str.strip():
        result["obsTime"] = mpc_date_to_iso8601(date_str)
        result["jd"] = mpc_date_to_jd(date_str)

    stn = line[77:80].strip()
    if stn:
        result["stn"] = stn

    return result


# ---------------------------------------------------------------------------
# Batch conversion on pandas columns
# ---------------------------------------------------------------------------
def pack_column(values, category_hint=None):
    """Pack a column of designations.

    Entries that cannot be packed become <NA>; no partial value is ever
    written.  Returns a pandas "string" Series aligned with the input.
    """
    def _pack_one(value):
        try:
            return pack(str(value), category_hint)
        except DesignationError:
            return pd.NA

    series = pd.Series(values)
    return series.map(_pack_one, na_action="ignore").astype("string")


def unpack_column(values):
    """Unpack a column of packed designations.

    Returns:
        DataFrame with "designation" (string) and "category" (Int64)
        columns aligned with the input; failures are <NA> in both.
    """
    def _unpack_one(value):
        try:
            return unpack(str(value))
        except DesignationError:
            return (pd.NA, pd.NA)

    series = pd.Series(values)
    pairs = [(pd.NA, pd.NA) if pd.isna(v) else _unpack_one(v) for v in series]
    return pd.DataFrame({
        "designation": pd.array([p[0] for p in pairs], dtype="string"),
        "category": pd.array([p[1] if p[1] is pd.NA else int(p[1])
                              for p in pairs], dtype="Int64"),
    }, index=series.index)


def load_designation_table(path):
    """Load a designation corpus file into a DataFrame.

    Each non-blank line not starting with '#' holds whitespace-separated
    fields: packed designation, category code, unpacked designation (the
    rest of the line, which may contain spaces).

    Returns:
        DataFrame with columns packed, category (int), unpacked.
    """
    rows = []
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            fields = line.split(None, 2)
            if len(fields) != 3:
                raise ValueError(f"{path}:{lineno}: expected 3 fields, "
                                 f"got {len(fields)}")
            packed, category, unpacked = fields
            rows.append((packed, int(category), unpacked.strip()))
    return pd.DataFrame(rows, columns=["packed", "category", "unpacked"])
