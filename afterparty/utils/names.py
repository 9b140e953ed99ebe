"""Parsing of pasted name lists."""

import re
from typing import List

_DELIMITER_RE = re.compile(r"[\n,;<>|/，]+")
_PARENTHETICAL_RE = re.compile(r"\([^)]*\)")
_NUMBER_PREFIX_RE = re.compile(r"^\d+[.)]?\s*")
_WHITESPACE_RE = re.compile(r"\s+")

# Header words people paste along with the names
STOP_WORDS = {"이름", "엔젤", "학생", "멤버", "팀", "name", "names", "angel", "member", "team"}


def normalize_member_name(raw: str) -> str:
    """Drop annotations and list numbering from one pasted chunk."""
    name = _PARENTHETICAL_RE.sub("", raw)
    name = _WHITESPACE_RE.sub(" ", name).strip()
    return _NUMBER_PREFIX_RE.sub("", name).strip()


def parse_delimited_names(raw: str) -> List[str]:
    """
    Split a free-text block into names.

    Names may be separated by newlines, commas, semicolons, slashes or pipes.
    Order is preserved and exact duplicates are dropped; case-insensitive
    de-duplication happens at ingestion.
    """
    names = []
    seen = set()

    for chunk in _DELIMITER_RE.split(raw or ""):
        name = normalize_member_name(chunk)
        if not name or name.lower() in STOP_WORDS or name in seen:
            continue
        seen.add(name)
        names.append(name)

    return names
