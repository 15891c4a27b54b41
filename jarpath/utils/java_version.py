from __future__ import annotations

import re
from typing import Optional

_SEPARATORS = re.compile(r"[-.+_]")
_LEADING_DIGITS = re.compile(r"^\d+")


def parse_java_version(version: Optional[str]) -> int:
    """Return the major Java version of a version string, or 0 if unknown.

    "17" -> 17, "11.0.2" -> 11, "1.8.0_292" -> 8, "21-ea" -> 21.
    """
    if not version:
        return 0
    parts = _SEPARATORS.split(version.strip())
    num = parts[1] if len(parts) > 1 and parts[0] == "1" else parts[0]
    m = _LEADING_DIGITS.match(num)
    return int(m.group(0)) if m else 0
