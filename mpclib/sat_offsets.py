"""
Satellite offset ('s') records for spacecraft astrometry.

Spacecraft observations in 80-column format come in pairs: an 'S' line with
the RA/Dec and an 's' line with the observer's geocentric position.  This
module builds the 's' line from a position vector and rewrites a batch of
records, obtaining positions from an ephemeris service supplied by the
caller (typically a wrapper around JPL Horizons vector tables).

Offset layout (https://minorplanetcenter.net/iau/info/SatelliteObs.html):
column 33 holds '1' for km or '2' for AU; signs sit in columns 35, 47, 59
and magnitudes in columns 36-45, 48-57, 60-69.  AU are used only when some
component exceeds 9999999 km.

    K20K42H  s2020 12 25.6957282 +14.3990440 -44.6299726 -17.5109273   ~5zHCC54
    LTMQ6Ga  s2019 06 26.2809121 -66851.9880 +403817.120 + 9373.8070   NEOCPC57

Usage:
    from mpclib.sat_offsets import insert_offsets

    def fetch_states(horizons_id, jds):
        ...   # return {jd: ((x, y, z), (vx, vy, vz))} in km and km/s

    lines, n_set, n_failed = insert_offsets(open("obs.txt"), fetch_states)
"""

import logging

from mpclib.mpc_convert import mpc_date_to_jd

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AU_IN_KM = 149597870.7
HST_LAUNCH_JD = 2448005.5            # 1990 April 24
JD_TOLERANCE = 1e-5
MAX_EPOCHS_PER_QUERY = 458           # keeps a Horizons TLIST URL under 8000 bytes
_KM_LIMIT = 9999999.0

# MPC code -> Horizons body index.  "Cas", "PSP" and "SoO" are not
# official MPC codes.
HORIZONS_IDS = {
    "245": -79,        # Spitzer
    "249": -21,        # SOHO
    "250": -48,        # Hubble
    "258": -139479,    # Gaia
    "274": -170,       # James Webb Space Telescope
    "Cas": -82,        # Cassini
    "C49": -234,       # STEREO-A
    "C50": -235,       # STEREO-B
    "C51": -163,       # WISE
    "C52": -128485,    # Swift
    "C53": -139089,    # NEOSSAT
    "C54": -98,        # New Horizons
    "C55": -227,       # Kepler
    "C56": -141043,    # LISA Pathfinder
    "C57": -95,        # TESS
    "C59": -148840,    # Yangwang-1
    "PSP": -96,        # Parker Solar Probe
    "SoO": -144,       # Solar Orbiter
}


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------

def is_satellite_obs(line):
    line = line.rstrip("\n")
    return len(line) >= 80 and line[14] in ("S", "s")


def satellite_obs_jd(line):
    """Julian date of a spacecraft 'S'/'s' record, or None.

    Records dated before the launch of HST are not treated as spacecraft
    observations.
    """
    if not is_satellite_obs(line):
        return None
    try:
        jd = mpc_date_to_jd(line[15:32])
    except ValueError:
        return None
    if jd < HST_LAUNCH_JD:
        return None
    return jd


def _format_component(value, in_au):
    mag = abs(value)
    if in_au:
        mag /= AU_IN_KM
        text = f"{mag:10.7f}" if mag > 9.9 else f"{mag:10.8f}"
    elif mag > 999999.0:
        text = f"{mag:10.2f}"
    elif mag > 99999.0:
        text = f"{mag:10.3f}"
    else:
        text = f"{mag:10.4f}"
    if len(text) > 10:
        raise ValueError(f"Offset {value} km does not fit the 's' record")
    return ("+" if value >= 0 else "-") + text


def format_offset_line(line, xyz_km):
    """Turn an 'S' record into the matching 's' offset record.

    Args:
        line: 80-column 'S' record.
        xyz_km: geocentric J2000 equatorial position of the observer in km.

    Returns:
        The 's' record (80 columns, no newline).  Columns 1-32 and 73-80 are
        kept from the input.
    """
    buff = list(line.rstrip("\n").ljust(80))
    in_au = any(abs(v) > _KM_LIMIT for v in xyz_km)

    buff[33:72] = " " * 39
    buff[32] = "2" if in_au else "1"
    for i, value in enumerate(xyz_km):
        start = 34 + i * 12
        buff[start:start + 11] = _format_component(value, in_au)
    buff[14] = "s"
    return "".join(buff)


def velocity_comment(line, vel_km_s, code):
    """COM line recording the observer velocity for an 'S' record."""
    vx, vy, vz = vel_km_s
    return f"COM vel (km/s) {line[15:31]}{vx:+13.7f}{vy:+13.7f}{vz:+13.7f} {code[:3]}"


# ---------------------------------------------------------------------------
# Batch processing
# ---------------------------------------------------------------------------

def pending_epochs(lines):
    """Collect the epochs of 'S' records, grouped by station code.

    Returns:
        dict of station code -> list of distinct JDs, in file order.
    """
    epochs = {}
    for line in lines:
        jd = satellite_obs_jd(line)
        if jd is None or line[14] != "S":
            continue
        code = line[77:80]
        jds = epochs.setdefault(code, [])
        if jd not in jds:
            jds.append(jd)
    return epochs


def chunk_epochs(jds, size=MAX_EPOCHS_PER_QUERY):
    """Split a list of epochs into query-sized chunks."""
    return [jds[i:i + size] for i in range(0, len(jds), size)]


def _match_state(states, jd):
    for state_jd, state in states.items():
        if abs(state_jd - jd) < JD_TOLERANCE:
            return state
    return None


def insert_offsets(lines, fetch_states, chunk_size=MAX_EPOCHS_PER_QUERY):
    """Add 's' offset records after every spacecraft 'S' record.

    Args:
        lines: iterable of 80-column records (other lines pass through).
        fetch_states: callable(horizons_id, jds) -> {jd: (xyz_km, vel_km_s)}.
            The jds are UTC Julian dates of the record dates; converting
            them to TT for the ephemeris service is up to fetch_states.
        chunk_size: maximum number of epochs per fetch_states call.

    Returns:
        (output_lines, n_set, n_failed).  Each 'S' record with a state is
        preceded by a velocity COM line and followed by its new 's' record;
        any old 's' record for that observation is dropped.  'S' records
        without a state are left as they are, along with their 's' records.
    """
    lines = [line.rstrip("\n") for line in lines]
    found = {}
    n_set = n_failed = 0

    for code, jds in pending_epochs(lines).items():
        horizons_id = HORIZONS_IDS.get(code)
        if horizons_id is None:
            logger.warning("Station %r is not a spacecraft with a known "
                           "Horizons index; %d observation(s) left as is",
                           code, len(jds))
            continue
        for chunk in chunk_epochs(jds, chunk_size):
            states = fetch_states(horizons_id, chunk)
            for jd in chunk:
                state = _match_state(states, jd)
                if state is None:
                    n_failed += 1
                else:
                    found.setdefault(code, {})[jd] = state
                    n_set += 1

    output = []
    for line in lines:
        jd = satellite_obs_jd(line)
        if jd is None:
            output.append(line)
            continue
        code = line[77:80]
        state = _match_state(found.get(code, {}), jd)
        if state is None:
            output.append(line)
        elif line[14] == "S":
            xyz, vel = state
            output.append(velocity_comment(line, vel, code))
            output.append(line)
            output.append(format_offset_line(line, xyz))
    logger.debug("%d positions set, %d failed", n_set, n_failed)
    return output, n_set, n_failed
