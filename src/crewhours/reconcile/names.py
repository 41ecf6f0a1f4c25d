"""Crew-member name cleanup shared by aggregation and the directory."""
from __future__ import annotations
import re

_PARENS_RE = re.compile(r"\s*\([^)]*\)")
_QUOTED_RE = re.compile(r'\s*"[^"]*"\s*')
_SPACES_RE = re.compile(r"\s+")
_NUMERIC_RE = re.compile(r"^\d+[,.]?\d*$")


def clean_person_name(raw: str | None) -> str:
    """Strip parentheticals, quoted nicknames and ``#`` markers.

    ``'Drew Gipson (D)'`` -> ``'Drew Gipson'``;
    ``'Malik "Fatu" Richardson'`` -> ``'Malik Richardson'``.
    """
    if not raw:
        return ""
    name = _PARENS_RE.sub("", raw.strip())
    name = _QUOTED_RE.sub(" ", name)
    name = name.replace("#", "")
    return _SPACES_RE.sub(" ", name).strip()


def split_name(cleaned: str) -> tuple[str, str]:
    parts = cleaned.split(" ")
    return parts[0], " ".join(parts[1:])


def looks_like_person(cleaned: str) -> bool:
    """False for values that leaked in from price or number columns."""
    return bool(cleaned) and "$" not in cleaned and not _NUMERIC_RE.match(cleaned)
