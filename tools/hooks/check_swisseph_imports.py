#!/usr/bin/env python3
"""
Fail commits that add direct swisseph/pyswisseph imports outside the ephemeris layer.

Approved locations:
- src/astrostorm/ephemeris/constants.py (body and house-system ids)
- src/astrostorm/ephemeris/time_utils.py (Julian day, ayanamsa)
- src/astrostorm/ephemeris/swe_backend.py (positions, angles, sunrise)
- src/astrostorm/ephemeris/houses.py (quadrant house cusps)

Analytics engines work on VedicChart and never call the library themselves.
"""
from __future__ import annotations

import re
import sys
from pathlib import Path

APPROVED_PATHS = {
    "src/astrostorm/ephemeris/constants.py",
    "src/astrostorm/ephemeris/time_utils.py",
    "src/astrostorm/ephemeris/swe_backend.py",
    "src/astrostorm/ephemeris/houses.py",
}

_IMPORT_RE = re.compile(r"^\s*(?:import|from)\s+(?:py)?swisseph\b", re.MULTILINE)


def is_approved(path: Path) -> bool:
    p = path.as_posix()
    return any(p == approved or p.endswith("/" + approved) for approved in APPROVED_PATHS)


def has_swisseph_import(text: str) -> bool:
    return _IMPORT_RE.search(text) is not None


def main(argv: list[str]) -> int:
    bad: list[str] = []
    for arg in argv:
        p = Path(arg)
        if not p.exists() or p.is_dir() or p.suffix != ".py":
            continue
        if is_approved(p):
            continue
        try:
            text = p.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            continue
        if has_swisseph_import(text):
            bad.append(str(p))
    if bad:
        print(
            "::error::Direct swisseph/pyswisseph imports are restricted to the ephemeris layer.\n"
            + "\n".join(f" - {b}" for b in bad)
        )
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
