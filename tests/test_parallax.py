"""Tests for parallax constants and observatory codes (mpclib/parallax.py)."""

import math
import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mpclib.parallax import (
    EARTH_MAJOR_AXIS_M,
    EARTH_MINOR_AXIS_M,
    ObservatorySite,
    find_obscode,
    lat_alt_to_parallax,
    normalize_parallax,
    parallax_to_lat_alt,
    parse_obscode_line,
    site_separation,
)

OBSCODES = [
    "Code  Long.   cos      sin    Name",
    "000   0.0000 0.62411 +0.77873 Greenwich",
    "250                           Hubble Space Telescope",
    "568 204.52780 0.94171 +0.33725 Maunakea",
    "",
]


# ============================================================================
# Ellipsoid conversions
# ============================================================================

class TestConversions:

    def test_equator_sea_level(self):
        rcos, rsin = lat_alt_to_parallax(0.0, 0.0)
        assert rcos == pytest.approx(1.0)
        assert rsin == pytest.approx(0.0, abs=1e-15)

    def test_pole_sea_level(self):
        rcos, rsin = lat_alt_to_parallax(90.0, 0.0)
        assert rcos == pytest.approx(0.0, abs=1e-12)
        assert rsin == pytest.approx(EARTH_MINOR_AXIS_M / EARTH_MAJOR_AXIS_M)

    @pytest.mark.parametrize("lat,alt", [
        (0.0, 0.0), (19.8207, 4205.0), (-30.2446, 2663.0),
        (51.4769, 46.0), (89.9, 2835.0), (-90.0, 0.0), (45.0, -400.0),
    ])
    def test_round_trip(self, lat, alt):
        rcos, rsin = lat_alt_to_parallax(lat, alt)
        lat2, alt2 = parallax_to_lat_alt(rcos, rsin)
        assert lat2 == pytest.approx(lat, abs=1e-9)
        assert alt2 == pytest.approx(alt, abs=1e-6)

    def test_arrays(self):
        lats = np.array([0.0, 30.0, 60.0])
        alts = np.array([0.0, 1000.0, 2000.0])
        rcos, rsin = lat_alt_to_parallax(lats, alts)
        assert rcos.shape == (3,)
        lat2, alt2 = parallax_to_lat_alt(rcos, rsin)
        np.testing.assert_allclose(lat2, lats, atol=1e-9)
        np.testing.assert_allclose(alt2, alts, atol=1e-6)

    def test_normalize_metres(self):
        rcos, rsin = normalize_parallax(EARTH_MAJOR_AXIS_M * 0.5, 3000000.0)
        assert rcos == pytest.approx(0.5)
        assert rsin == pytest.approx(3000000.0 / EARTH_MAJOR_AXIS_M)

    def test_normalize_earth_radii(self):
        rcos, rsin = normalize_parallax(0.62411, 0.77873)
        assert rcos == 0.62411
        assert rsin == 0.77873

    def test_normalize_arrays(self):
        rcos, rsin = lat_alt_to_parallax(np.array([10.0, 50.0]),
                                         np.array([0.0, 2000.0]))
        out_cos, out_sin = normalize_parallax(rcos, rsin)
        np.testing.assert_allclose(out_cos, rcos)
        np.testing.assert_allclose(out_sin, rsin)

    def test_normalize_mixed_units(self):
        rcos, rsin = normalize_parallax(np.array([0.5, EARTH_MAJOR_AXIS_M * 0.5]),
                                        np.array([0.8, 0.0]))
        np.testing.assert_allclose(rcos, [0.5, 0.5])
        np.testing.assert_allclose(rsin, [0.8, 0.0])


# ============================================================================
# ObsCodes.html
# ============================================================================

class TestObsCodes:

    def test_greenwich(self):
        site = parse_obscode_line(OBSCODES[1])
        assert site.code == "000"
        assert site.name == "Greenwich"
        assert site.has_location
        assert site.lon == 0.0
        assert site.lat == pytest.approx(51.477, abs=0.01)
        assert -100.0 < site.alt < 200.0

    def test_west_longitude(self):
        site = parse_obscode_line(OBSCODES[3])
        assert site.lon == pytest.approx(204.5278 - 360.0)
        assert site.lat == pytest.approx(19.8, abs=0.1)
        assert 3500.0 < site.alt < 4500.0

    def test_space_based(self):
        site = parse_obscode_line(OBSCODES[2])
        assert site.code == "250"
        assert site.name == "Hubble Space Telescope"
        assert not site.has_location

    def test_header_and_blank(self):
        assert parse_obscode_line(OBSCODES[0]) is None
        assert parse_obscode_line(OBSCODES[4]) is None

    def test_find(self):
        assert find_obscode(OBSCODES, "568").name == "Maunakea"
        assert find_obscode(OBSCODES, "XYZ") is None


class TestSeparation:

    def test_same_site(self):
        site = parse_obscode_line(OBSCODES[1])
        dist, _ = site_separation(site, site)
        assert dist == pytest.approx(0.0, abs=1e-9)

    def test_due_east_on_equator(self):
        a = ObservatorySite("A", "a", 0.0, lat=0.0, alt=0.0)
        b = ObservatorySite("B", "b", 1.0, lat=0.0, alt=0.0)
        dist, bearing = site_separation(a, b)
        assert dist == pytest.approx(2 * math.pi * EARTH_MAJOR_AXIS_M / 360000.0)
        assert bearing == pytest.approx(90.0)

    def test_due_west_bearing(self):
        a = ObservatorySite("A", "a", 1.0, lat=0.0, alt=0.0)
        b = ObservatorySite("B", "b", 0.0, lat=0.0, alt=0.0)
        _, bearing = site_separation(a, b)
        assert bearing == pytest.approx(270.0)

    def test_due_north(self):
        a = ObservatorySite("A", "a", 10.0, lat=0.0, alt=0.0)
        b = ObservatorySite("B", "b", 10.0, lat=10.0, alt=0.0)
        _, bearing = site_separation(a, b)
        assert bearing == pytest.approx(0.0, abs=1e-9)
