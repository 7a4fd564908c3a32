"""
Geodetic latitude/altitude <-> parallax constants, and MPC observatory codes.

Parallax constants (rho cos phi', rho sin phi') give an observatory's
geocentric position in units of the Earth's equatorial radius, as listed
in the MPC's ObsCodes.html.  Conversions use the GRS1980 ellipsoid; the
WGS84 minor axis differs by about 0.1 mm.

Usage:
    from mpclib.parallax import lat_alt_to_parallax, parallax_to_lat_alt

    rcos, rsin = lat_alt_to_parallax(51.4769, 46.0)
    lat, alt = parallax_to_lat_alt(rcos, rsin)

All conversion functions accept scalars or numpy arrays.
"""

import math
from dataclasses import dataclass

import numpy as np

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EARTH_MAJOR_AXIS_M = 6378137.0
EARTH_MINOR_AXIS_M = 6356752.314140347

# Parallax constants larger than this are taken to be in metres
_METRES_THRESHOLD = 2.0

_MAX_ITERATIONS = 20
_LAT_TOLERANCE_RAD = 1e-15


# ---------------------------------------------------------------------------
# Ellipsoid conversions
# ---------------------------------------------------------------------------

def lat_alt_to_parallax(lat_deg, alt_m, major=EARTH_MAJOR_AXIS_M,
                        minor=EARTH_MINOR_AXIS_M):
    """Geodetic latitude and altitude to parallax constants.

    Args:
        lat_deg: geodetic latitude in degrees.
        alt_m: height above the ellipsoid in metres.
        major, minor: ellipsoid semi-axes in metres.

    Returns:
        (rho_cos_phi, rho_sin_phi) in units of the major axis.
    """
    lat = np.radians(lat_deg)
    axis_ratio = minor / major
    u = np.arctan2(np.sin(lat) * axis_ratio, np.cos(lat))
    height = np.asarray(alt_m, dtype=float) / major
    rho_cos_phi = np.cos(u) + height * np.cos(lat)
    rho_sin_phi = axis_ratio * np.sin(u) + height * np.sin(lat)
    return rho_cos_phi, rho_sin_phi


def parallax_to_lat_alt(rho_cos_phi, rho_sin_phi, major=EARTH_MAJOR_AXIS_M,
                        minor=EARTH_MINOR_AXIS_M):
    """Parallax constants to geodetic latitude and altitude.

    Finds the closest point on the ellipsoid by fixed-point iteration on
    tan(lat) = (z + e^2 N sin(lat)) / p, which stays well conditioned at
    the poles.

    Returns:
        (lat_deg, alt_m)
    """
    p = np.asarray(rho_cos_phi, dtype=float) * major
    z = np.asarray(rho_sin_phi, dtype=float) * major
    e2 = 1.0 - (minor / major) ** 2

    lat = np.arctan2(z, p * (1.0 - e2))
    for _ in range(_MAX_ITERATIONS):
        sin_lat = np.sin(lat)
        n = major / np.sqrt(1.0 - e2 * sin_lat ** 2)
        new_lat = np.arctan2(z + e2 * n * sin_lat, p)
        done = np.all(np.abs(new_lat - lat) < _LAT_TOLERANCE_RAD)
        lat = new_lat
        if done:
            break

    sin_lat = np.sin(lat)
    alt = (p * np.cos(lat) + z * sin_lat
           - major * np.sqrt(1.0 - e2 * sin_lat ** 2))
    return np.degrees(lat), alt


def normalize_parallax(rho_cos_phi, rho_sin_phi, major=EARTH_MAJOR_AXIS_M):
    """Return parallax constants in Earth radii.

    Values that look like metres (either magnitude above 2) are divided by
    the major axis; values already in Earth radii are returned unchanged.
    Arrays are scaled element by element.
    """
    rho_cos_phi = np.asarray(rho_cos_phi, dtype=float)
    rho_sin_phi = np.asarray(rho_sin_phi, dtype=float)
    in_metres = ((np.abs(rho_cos_phi) > _METRES_THRESHOLD)
                 | (np.abs(rho_sin_phi) > _METRES_THRESHOLD))
    scale = np.where(in_metres, major, 1.0)
    return rho_cos_phi / scale, rho_sin_phi / scale


# ---------------------------------------------------------------------------
# Observatory codes (ObsCodes.html)
# ---------------------------------------------------------------------------

@dataclass
class ObservatorySite:
    code: str
    name: str
    lon: float = None            # degrees east, -180 < lon <= 180
    rho_cos_phi: float = None
    rho_sin_phi: float = None
    lat: float = None            # geodetic degrees
    alt: float = None            # metres

    @property
    def has_location(self):
        return self.lon is not None


def parse_obscode_line(line):
    """Parse one ObsCodes.html line.

    Columns: 1-3 code, 4-13 longitude (deg E), 14-21 rho cos phi,
    22-30 rho sin phi, 31- name.  Space-based and roving codes have blank
    geometry and come back with has_location False.

    Returns:
        ObservatorySite, or None for header/blank lines.
    """
    line = line.rstrip("\n")
    if len(line) < 4 or line.startswith("Code") or not line[:3].strip():
        return None
    code = line[:3]
    lon_str, cos_str, sin_str = line[3:13], line[13:21], line[21:30]
    if not (lon_str.strip() and cos_str.strip() and sin_str.strip()):
        return ObservatorySite(code, line[30:].strip() or line[3:].strip())

    name = line[30:].strip()

    lon = float(lon_str)
    if lon > 180.0:
        lon -= 360.0
    rho_cos_phi = float(cos_str)
    rho_sin_phi = float(sin_str)
    lat, alt = parallax_to_lat_alt(rho_cos_phi, rho_sin_phi)
    return ObservatorySite(code, name, lon, rho_cos_phi, rho_sin_phi,
                           float(lat), float(alt))


def find_obscode(lines, code):
    """Return the ObservatorySite for `code` from ObsCodes.html lines."""
    code = code.strip()
    for line in lines:
        if line[:3] == code:
            site = parse_obscode_line(line)
            if site is not None:
                return site
    return None


def site_separation(site1, site2, radius_m=EARTH_MAJOR_AXIS_M):
    """Great-circle distance and bearing from site1 to site2.

    Returns:
        (distance_km, bearing_deg) with bearing 0=N, 90=E, 180=S, 270=W.
    """
    lon1, lat1 = math.radians(site1.lon), math.radians(site1.lat)
    lon2, lat2 = math.radians(site2.lon), math.radians(site2.lat)
    dlon = lon2 - lon1

    hav = (math.sin((lat2 - lat1) / 2) ** 2
           + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    angle = 2.0 * math.asin(min(1.0, math.sqrt(hav)))

    bearing = math.degrees(math.atan2(
        math.sin(dlon) * math.cos(lat2),
        math.cos(lat1) * math.sin(lat2)
        - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)))
    return angle * radius_m / 1000.0, bearing % 360.0
