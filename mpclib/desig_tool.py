#!/usr/bin/env python3
"""
Pack, unpack, and verify MPC designations from the command line.

Usage:
    python3 -m mpclib.desig_tool pack "1995 XA"
    python3 -m mpclib.desig_tool pack --category 5 "Neptune 210"
    python3 -m mpclib.desig_tool unpack J95X00A
    python3 -m mpclib.desig_tool check tests/data/test_des.txt
    python3 -m mpclib.desig_tool check --verbose --max-errors 5 test_des.txt

The check command runs every line of a designation corpus (packed field,
category code, unpacked designation) through pack and unpack and reports
mismatches.  Category 5 lines written with Arabic numerals are checked in
the pack direction only.
"""

import argparse
import os
import sys

from mpclib.designation import Category, pack, unpack
from mpclib.errors import DesignationError
from mpclib.mpc_convert import load_designation_table


def check_row(packed, category, unpacked):
    """Check one corpus entry.

    Returns:
        List of problem descriptions (empty when the entry passes).
    """
    problems = []
    try:
        got = pack(unpacked, category)
        if got != packed:
            problems.append(f"pack({unpacked!r}) = {got!r}, expected {packed!r}")
    except DesignationError as e:
        problems.append(f"pack({unpacked!r}) failed: {e}")

    if category == Category.PERMANENT_SATELLITE and not unpacked.split()[-1].isalpha():
        return problems

    try:
        got = unpack(packed)
        if got != (unpacked, category):
            problems.append(f"unpack({packed!r}) = {got[0]!r} (category "
                            f"{int(got[1])}), expected {unpacked!r} "
                            f"(category {category})")
    except DesignationError as e:
        problems.append(f"unpack({packed!r}) failed: {e}")
    return problems


def check_file(path, max_errors=0, verbose=False):
    """Verify a designation corpus file.

    Args:
        path: corpus file.
        max_errors: Stop listing after this many failing entries (0 = all).
        verbose: Print every entry, not only failures.

    Returns:
        True if every entry passed.
    """
    table = load_designation_table(path)
    n_failed = 0
    for row in table.itertuples(index=False):
        problems = check_row(row.packed, int(row.category), row.unpacked)
        if verbose and not problems:
            print(f"  ok    {row.packed:>8} {row.category:2d} {row.unpacked}")
        if problems:
            n_failed += 1
            if max_errors and n_failed > max_errors:
                continue
            for problem in problems:
                print(f"  FAIL  {problem}")

    if n_failed:
        if max_errors and n_failed > max_errors:
            print(f"... and {n_failed - max_errors} more failing entries. "
                  f"Use --max-errors 0 to show all.")
        print(f"FAILED -- {n_failed} of {len(table)} entries")
        return False
    print(f"PASSED -- {len(table)} entries")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Pack and unpack MPC designations"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_pack = sub.add_parser("pack", help="Pack a human-readable designation")
    p_pack.add_argument("designation", nargs="+",
                        help="Designation, e.g. 1995 XA (quotes optional)")
    p_pack.add_argument("--category", "-c", type=int,
                        choices=[int(c) for c in Category],
                        help="Category code to disambiguate the grammar")

    p_unpack = sub.add_parser("unpack", help="Unpack a packed designation")
    p_unpack.add_argument("packed", help="Packed designation, e.g. J95X00A")

    p_check = sub.add_parser("check", help="Verify a designation corpus file")
    p_check.add_argument("corpus", help="Corpus file (packed, category, unpacked)")
    p_check.add_argument("--max-errors", type=int, default=20,
                         help="Max failing entries to display (0=all, default=20)")
    p_check.add_argument("--verbose", "-v", action="store_true",
                         help="Show passing entries too")

    args = parser.parse_args(argv)

    if args.command == "check":
        if not os.path.isfile(args.corpus):
            print(f"Error: File not found: {args.corpus}", file=sys.stderr)
            return 1
        ok = check_file(args.corpus, max_errors=args.max_errors,
                        verbose=args.verbose)
        return 0 if ok else 1

    try:
        if args.command == "pack":
            print(pack(" ".join(args.designation), args.category))
        else:
            text, category = unpack(args.packed)
            print(f"{text}\t{int(category)}")
    except DesignationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
