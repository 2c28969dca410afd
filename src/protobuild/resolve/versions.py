"""Version ordering for repository version lists."""

from __future__ import annotations

import re
from collections.abc import Iterable

_SPLIT = re.compile(r"[.-]")


def version_key(version: str) -> tuple[tuple[int, ...], int, str]:
    """Sort key placing releases above their qualified pre-releases.

    ``1.10.0`` sorts above ``1.9``, and ``2.0`` above ``2.0-rc1``.
    """
    numbers: list[int] = []
    qualifier_parts: list[str] = []
    for part in _SPLIT.split(version):
        if not qualifier_parts and part.isdigit():
            numbers.append(int(part))
        else:
            qualifier_parts.append(part.lower())
    while numbers and numbers[-1] == 0:
        numbers.pop()
    qualifier = "-".join(qualifier_parts)
    return (tuple(numbers), 0 if qualifier else 1, qualifier)


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Return versions highest first."""
    return sorted(versions, key=version_key, reverse=True)


def highest_version(versions: Iterable[str]) -> str | None:
    ordered = sort_versions(versions)
    return ordered[0] if ordered else None


def matches_range(version: str, version_range: str) -> bool:
    """Check ``version`` against ``>X``, ``>=X``, ``(X,]`` or ``[X,]``."""
    expression = version_range.strip()
    if expression.startswith(">="):
        return version_key(version) >= version_key(expression[2:].strip())
    if expression.startswith(">"):
        return version_key(version) > version_key(expression[1:].strip())
    match = re.fullmatch(r"([(\[])\s*([^,\s]*)\s*,\s*([^\])\s]*)\s*([)\]])", expression)
    if match is None:
        return version == expression
    opening, lower, upper, closing = match.groups()
    key = version_key(version)
    if lower:
        lower_key = version_key(lower)
        if key < lower_key or (opening == "(" and key == lower_key):
            return False
    if upper:
        upper_key = version_key(upper)
        if key > upper_key or (closing == ")" and key == upper_key):
            return False
    return True
