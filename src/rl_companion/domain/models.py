"""Domain models for rl_companion — pure dataclasses, no SQLAlchemy dependency."""

import re
from dataclasses import dataclass
from datetime import datetime

from src.rl_common.errors import ValidationError

_WHITESPACE_RUN = re.compile(r"\s+")

MAX_NAME_LENGTH = 64


@dataclass
class Companion:
    id: str                 # immutable, derived from the name at creation
    name: str               # display name, unique case-insensitively
    created_at: datetime | None = None


def normalize_name(name: object) -> str:
    """Strip surrounding whitespace; reject empty or oversized names."""
    if not isinstance(name, str):
        raise ValidationError("name must be a string")
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("name must not be empty")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"name must be at most {MAX_NAME_LENGTH} characters")
    return cleaned


def derive_companion_id(name: str) -> str:
    """' Ana  Maria ' -> 'ANA_MARIA'.

    Uppercasing can lengthen a name ("ß" -> "SS"), so the id is checked on its own.
    """
    companion_id = _WHITESPACE_RUN.sub("_", name.strip().upper())
    if len(companion_id) > MAX_NAME_LENGTH:
        raise ValidationError(f"derived id must be at most {MAX_NAME_LENGTH} characters")
    return companion_id


def name_key(name: str) -> str:
    """Comparison key for the case-insensitive uniqueness rule."""
    return name.strip().casefold()
