from __future__ import annotations

import re
from typing import Any, Iterable

from ..core.exceptions import ValidationError

_INT_PATTERN = re.compile(r"-?[0-9]+", re.ASCII)


def normalize_member_id(value: Any) -> int:
    """Coerce a roster entry into an int member id.

    Accepts ints, numeric strings (``"206"``) and ``{"member_id": ...}``
    assignment objects. Booleans and fractional numbers are rejected.
    """

    if isinstance(value, dict):
        if "member_id" not in value:
            raise ValidationError(f"Invalid member reference: {value!r}")
        value = value["member_id"]

    if isinstance(value, bool):
        raise ValidationError(f"Invalid member id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise ValidationError(f"Invalid member id: {value!r}")


def normalize_member_ids(values: Iterable[Any] | None) -> list[int]:
    """Normalize a roster to unique int ids, keeping first-seen order."""

    if values is None:
        return []
    if isinstance(values, (str, bytes, dict)):
        raise ValidationError("Member list must be an array")

    out: list[int] = []
    seen: set[int] = set()
    for v in values:
        member_id = normalize_member_id(v)
        if member_id not in seen:
            seen.add(member_id)
            out.append(member_id)
    return out
