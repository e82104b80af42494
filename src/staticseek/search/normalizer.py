"""Text normalization shared by indexing and querying."""

from __future__ import annotations

import re


# Unicode \s also matches U+3000 (ideographic space) and U+00A0
_WHITESPACE_RE = re.compile(r"\s+", re.UNICODE)


def normalize(text: str) -> str:
    """Case-fold ``text`` and collapse whitespace runs to single ASCII spaces.

    Fragments and queries must both pass through this function; matching is
    plain string comparison on its output.
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.casefold()).strip(" ")
