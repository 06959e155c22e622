from __future__ import annotations

import re
from pathlib import Path
from typing import Optional


def _token(pattern: str) -> re.Pattern[str]:
    # Whitespace or the start/end of the text must surround the token.
    return re.compile(rf"(?<!\S){pattern}(?!\S)")


LICENSE_SIGNATURES: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    ("BSD", (_token(r"BSD"),)),
    ("GPL", (_token(r"GPL"), _token(r"GPLv2"))),
    ("LGPL", (_token(r"LGPL"),)),
    ("MIT", (_token(r"MIT"), _token(r"\(MIT\)"))),
    ("Apache", (_token(r"Apache\sLicense"),)),
    ("MPL", (_token(r"MPL"),)),
    ("WTFPL", (_token(r"DO\sWHAT\sTHE\sFUCK\sYOU\sWANT\sTO\sPUBLIC\sLICENSE"),)),
)

LICENSE_NAMES = tuple(name for name, _ in LICENSE_SIGNATURES)


def identify_license(text: Optional[str]) -> list[str]:
    """Return the sorted names of every license whose signature appears in ``text``.

    Matching is case-sensitive and each token has to stand on its own between
    whitespace (or the ends of the text), so ``"MIT."`` or ``"GPLv3"`` do not
    count. Text without a recognisable signature gives an empty list rather
    than an error.
    """

    if not text:
        return []

    found = [
        name
        for name, patterns in LICENSE_SIGNATURES
        if any(pattern.search(text) for pattern in patterns)
    ]
    return sorted(found)


def identify_file(path: Path) -> list[str]:
    try:
        data = path.read_bytes()
    except OSError:
        return []

    return identify_license(data.decode("utf-8", errors="ignore"))
