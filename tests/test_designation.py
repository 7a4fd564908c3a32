"""Tests for the designation codec (mpclib/designation.py).

Covers the documented pack/unpack examples, every category's grammar,
layout classification, range limits, the lossy Roman-numeral category and
the error taxonomy.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mpclib.designation import (
    Category,
    CometProvisional,
    NumberedComet,
    NumberedMinorPlanet,
    OpaqueDesignation,
    PermanentSatellite,
    ProvisionalDesignation,
    SatelliteProvisional,
    SurveyDesignation,
    MAX_NUMBERED,
    classify_packed,
    from_packed,
    from_roman,
    pack,
    parse_designation,
    to_roman,
    unpack,
)
from mpclib.errors import (
    DesignationError,
    OutOfRange,
    UnrecognizedDesignation,
    UnrecognizedPackedForm,
)


# ============================================================================
# Reference examples
# ============================================================================

class TestReferenceExamples:
    """Concrete cases that pin the packed formats."""

    def test_provisional(self):
        assert pack("1995 XA", 0) == "J95X00A"
        assert unpack("J95X00A") == ("1995 XA", 0)

    def test_numbered(self):
        assert pack("(433)", 1) == "00433"

    def test_tilde_numbers(self):
        assert pack("(620000)", 1) == "~0000"
        assert pack("(620036)", 1) == "~000a"

    def test_satellite(self):
        assert pack("S/2003 J 2", 4) == "SK03J020"

    def test_numbered_comet(self):
        assert pack("P/41", 3) == "0041P"

    def test_roman_collapse(self):
        assert pack("Neptune 210", 5) == "N210S"
        assert unpack("N210S") == ("Neptune CCX", 5)
        assert unpack("N210S") != ("Neptune 210", 5)

    def test_pass_through(self):
        assert unpack("WT1190F") == ("WT1190F", -1)

    def test_extended_provisional(self):
        assert pack("2026 CA620", 0) == "_QC0000"
        assert unpack("_QC0000") == ("2026 CA620", 0)


# ============================================================================
# Numbered minor planets
# ============================================================================

class TestNumbered:

    def test_zero_padded(self):
        assert pack("(1)") == "00001"
        assert pack("(99999)") == "99999"

    def test_letter_prefix(self):
        assert pack("(100000)") == "A0000"
        assert pack("(164060)") == "G4060"
        assert pack("(360000)") == "a0000"
        assert pack("(619999)") == "z9999"

    def test_tilde_range(self):
        assert pack("(620061)") == "~000z"
        assert pack("(620062)") == "~0010"
        assert pack("(3140113)") == "~AZaz"
        assert pack(f"({MAX_NUMBERED})") == "~zzzz"

    def test_bare_number_without_hint(self):
        assert pack("433") == "00433"
        assert pack("780896") == "~0fr6"

    def test_unpack(self):
        assert unpack("00433") == ("(433)", 1)
        assert unpack("G4060") == ("(164060)", 1)
        assert unpack("~0fr6") == ("(780896)", 1)

    def test_unpack_ignores_padding(self):
        assert unpack("00433  ") == ("(433)", 1)

    def test_beyond_tilde_range(self):
        with pytest.raises(OutOfRange):
            pack(f"({MAX_NUMBERED + 1})")

    def test_zero(self):
        with pytest.raises(OutOfRange):
            pack("(0)")

    def test_unpack_zero(self):
        with pytest.raises(UnrecognizedPackedForm):
            unpack("00000")

    def test_malformed_tilde(self):
        with pytest.raises(UnrecognizedPackedForm):
            unpack("~000")


# ============================================================================
# Provisional designations
# ============================================================================

class TestProvisional:

    def test_cycle_digits(self):
        assert pack("2020 CD3") == "K20C03D"
        assert pack("2024 YR4") == "K24Y04R"

    def test_cycle_letter(self):
        assert pack("1998 SQ108") == "J98SA8Q"
        assert pack("2007 TA418") == "K07Tf8A"
        assert pack("2099 AZ619") == "K99Az9Z"

    def test_unpack_cycle_letter(self):
        assert unpack("K07Tf8A") == ("2007 TA418", 0)

    def test_survey(self):
        assert pack("2040 P-L") == "PLS2040"
        assert pack("3141 T-3") == "T3S3141"
        assert unpack("T1S1010") == ("1010 T-1", 0)

    def test_survey_record(self):
        assert parse_designation("2040 P-L") == SurveyDesignation("P-L", 2040)

    def test_half_month_i_rejected(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("1995 IA", 0)

    def test_order_i_rejected(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("1995 XI", 0)

    def test_explicit_zero_cycle_rejected(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("1995 XA0", 0)

    def test_year_too_early(self):
        with pytest.raises(OutOfRange):
            pack("0995 XA", 0)


class TestExtendedProvisional:
    """Cycle counts of 620 and above use the '_' form."""

    def test_consecutive_order_letters(self):
        assert pack("2026 CB620") == "_QC0001"
        assert pack("2026 CZ620") == "_QC000O"
        assert pack("2026 CA621") == "_QC000P"

    def test_large_cycle(self):
        assert pack("2059 MX129941") == "_xMDZ3v"
        assert unpack("_xMDZ3v") == ("2059 MX129941", 0)

    def test_upper_bound(self):
        assert pack("2061 YL591673") == "_zYzzzz"
        with pytest.raises(OutOfRange):
            pack("2061 YM591673")

    def test_last_regular_cycle(self):
        assert pack("2026 CA619") == "K26Cz9A"

    def test_year_outside_extended_range(self):
        with pytest.raises(OutOfRange):
            pack("1999 CA620")
        with pytest.raises(OutOfRange):
            pack("2062 CA620")

    def test_malformed_sentinel(self):
        with pytest.raises(UnrecognizedPackedForm):
            unpack("_QI0000")


# ============================================================================
# Comets
# ============================================================================

class TestComets:

    def test_comet_style(self):
        assert pack("C/1995 O1") == "CJ95O010"
        assert unpack("CK19Y040") == ("C/2019 Y4", 2)

    def test_fragment(self):
        assert pack("D/1993 F2-B") == "DJ93F02b"
        assert unpack("DJ93F02b") == ("D/1993 F2-B", 2)

    def test_asteroid_style(self):
        assert pack("P/2010 TO20") == "PK10T20O"
        assert unpack("PK19L02D") == ("P/2019 LD2", 2)

    def test_asteroid_style_extended(self):
        assert pack("C/2003 MX129941") == "C_3MDZ3v"
        assert unpack("C_3MDZ3v") == ("C/2003 MX129941", 2)

    def test_comet_number_zero_packed(self):
        with pytest.raises(UnrecognizedPackedForm):
            unpack("CK19Y000")

    def test_numbered(self):
        assert pack("P/1") == "0001P"
        assert pack("D/3", 3) == "0003D"
        assert unpack("0041P") == ("P/41", 3)

    def test_numbered_alternate_form(self):
        assert pack("41P") == "0041P"
        assert unpack(pack("41P")) == ("P/41", 3)

    def test_numbered_fragments(self):
        assert pack("P/3141-E") == "3141Pe"
        assert pack("P/3141-AZ") == "3141Paz"
        assert unpack("3141Paz") == ("P/3141-AZ", 3)

    def test_numbered_comet_limit(self):
        with pytest.raises(OutOfRange):
            pack("P/10000")

    def test_records(self):
        assert parse_designation("P/73-B") == NumberedComet("P", 73, "B")
        assert parse_designation("C/1995 O1") == CometProvisional(
            "C", 1995, "O", 1)
        assert parse_designation("P/2010 TO20") == CometProvisional(
            "P", 2010, "T", 20, order="O")


# ============================================================================
# Natural satellites
# ============================================================================

class TestSatellites:

    def test_provisional(self):
        assert pack("S/2004 N 1") == "SK04N010"
        assert unpack("SJ45Ux90") == ("S/1945 U 599", 4)

    def test_three_digit_number(self):
        assert pack("S/2019 S 100") == "SK19SA00"

    def test_number_limit(self):
        with pytest.raises(OutOfRange):
            pack("S/2019 S 620")

    def test_permanent_roman(self):
        assert pack("Jupiter XIII") == "J013S"
        assert unpack("U024S") == ("Uranus XXIV", 5)

    def test_permanent_arabic_collapses(self):
        assert pack("Uranus 24", 5) == pack("Uranus XXIV", 5)
        assert unpack(pack("Uranus 24", 5)) == ("Uranus XXIV", 5)

    def test_records(self):
        assert parse_designation("S/2003 J 2") == SatelliteProvisional(
            "J", 2003, 2)
        assert parse_designation("Neptune 210") == PermanentSatellite("N", 210)

    def test_non_canonical_roman(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("Neptune IIII", 5)

    def test_permanent_limit(self):
        with pytest.raises(OutOfRange):
            pack("Saturn 1000", 5)


class TestRomanNumerals:

    @pytest.mark.parametrize("number,numeral", [
        (1, "I"), (4, "IV"), (9, "IX"), (14, "XIV"), (40, "XL"),
        (82, "LXXXII"), (210, "CCX"), (444, "CDXLIV"), (999, "CMXCIX"),
    ])
    def test_known(self, number, numeral):
        assert to_roman(number) == numeral
        assert from_roman(numeral) == number

    def test_all_round_trip(self):
        for n in range(1, 1000):
            assert from_roman(to_roman(n)) == n

    def test_out_of_range(self):
        with pytest.raises(OutOfRange):
            to_roman(0)
        with pytest.raises(OutOfRange):
            from_roman("M")


# ============================================================================
# Pass-through categories
# ============================================================================

class TestPassThrough:

    @pytest.mark.parametrize("text", ["WT1190F", "9496058", "A11guOI"])
    def test_unrecognized_identity(self, text):
        assert pack(text, -1) == text
        assert unpack(text) == (text, -1)

    @pytest.mark.parametrize("text", ["1992-044A", "1963-731KHG"])
    def test_cospar_identity(self, text):
        assert pack(text, 6) == text
        assert unpack(text) == (text, 6)

    def test_detection_without_hint(self):
        assert pack("WT1190F") == "WT1190F"
        assert parse_designation("1992-044A") == OpaqueDesignation(
            "1992-044A", Category.OPAQUE)

    def test_hint_mismatch(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("WT1190F", 6)

    @pytest.mark.parametrize("text", ["A1234", "J95X00A", "0041P", "N210S"])
    def test_packed_layouts_do_not_pass_through(self, text):
        # These would unpack as a different designation
        with pytest.raises(UnrecognizedDesignation):
            pack(text)
        with pytest.raises(UnrecognizedDesignation):
            pack(text, -1)

    @pytest.mark.parametrize("text", ["hello world", "WT-1190F", "~0000"])
    def test_pass_through_needs_single_token(self, text):
        with pytest.raises(UnrecognizedDesignation):
            pack(text, -1)

    @pytest.mark.parametrize("text", ["WT1190F", "9496058", "A11guOI", "ZTF0abc"])
    def test_pass_through_is_symmetric(self, text):
        assert unpack(pack(text, -1)) == (text, -1)


# ============================================================================
# Classification and errors
# ============================================================================

class TestClassification:

    @pytest.mark.parametrize("packed,category", [
        ("00433", Category.NUMBERED),
        ("~0000", Category.NUMBERED),
        ("J95X00A", Category.PROVISIONAL),
        ("_QC0000", Category.PROVISIONAL),
        ("PLS2040", Category.PROVISIONAL),
        ("CJ95O010", Category.COMET_PROVISIONAL),
        ("C_3MDZ3v", Category.COMET_PROVISIONAL),
        ("0041P", Category.COMET_NUMBERED),
        ("3141Paz", Category.COMET_NUMBERED),
        ("SK03J020", Category.SATELLITE),
        ("N210S", Category.PERMANENT_SATELLITE),
        ("1992-044A", Category.OPAQUE),
        ("WT1190F", Category.UNRECOGNIZED),
    ])
    def test_classify(self, packed, category):
        assert classify_packed(packed) == category

    def test_category_codes(self):
        assert [int(c) for c in Category] == [-1, 0, 1, 2, 3, 4, 5, 6]

    def test_from_packed_records(self):
        assert from_packed("00433") == NumberedMinorPlanet(433)
        assert from_packed("J95X00A") == ProvisionalDesignation(
            1995, "X", "A", 0)


class TestErrors:

    def test_error_hierarchy(self):
        for exc in (UnrecognizedDesignation, UnrecognizedPackedForm, OutOfRange):
            assert issubclass(exc, DesignationError)
            assert issubclass(exc, ValueError)

    def test_empty_designation(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("   ")

    def test_garbage_designation(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("not a designation")

    def test_hint_grammar_mismatch(self):
        with pytest.raises(UnrecognizedDesignation):
            pack("1995 XA", 1)

    def test_unknown_category_code(self):
        with pytest.raises(ValueError):
            pack("1995 XA", 7)

    def test_empty_packed(self):
        with pytest.raises(UnrecognizedPackedForm):
            unpack("")

    def test_illegal_packed_characters(self):
        with pytest.raises(UnrecognizedPackedForm):
            unpack("J95 X00A")
        with pytest.raises(UnrecognizedPackedForm):
            unpack("K24*04R")


# ============================================================================
# Round trips
# ============================================================================

class TestRoundTrip:
    """unpack(pack(d)) == d for every category except 5."""

    @pytest.mark.parametrize("text", [
        "(1)", "(99999)", "(100000)", "(619999)", "(620000)", "(15396335)",
        "1995 XA", "2007 TA418", "2040 P-L", "2026 CA620", "2059 MX129941",
        "C/1995 O1", "D/1993 F2-B", "P/2010 TO20", "C/2003 MX129941",
        "P/41", "P/3141-AZ", "S/2003 J 2", "S/1945 U 599",
    ])
    def test_round_trip(self, text):
        packed = pack(text)
        assert unpack(packed)[0] == text

    def test_numbered_sweep_across_boundaries(self):
        for n in (99998, 99999, 100000, 100001, 619998, 619999, 620000,
                  620001, 620061, 620062, 620063, 620000 + 3843,
                  620000 + 3844):
            assert unpack(pack(f"({n})")) == (f"({n})", 1)

    def test_cycle_sweep(self):
        for cycle in (0, 1, 9, 10, 99, 100, 109, 110, 359, 360, 619, 620,
                      621, 1000):
            text = f"2026 CA{cycle}" if cycle else "2026 CA"
            assert unpack(pack(text)) == (text, 0)
