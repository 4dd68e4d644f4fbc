"""Version comparison for update decisions."""

import logging
import re
from itertools import zip_longest
from typing import List

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)

# Rank of the non-numeric segments; a number ranks as "#". Unknown tags rank lowest.
_TAG_RANKS = {
    "dev": 0,
    "alpha": 1,
    "a": 1,
    "beta": 2,
    "b": 2,
    "rc": 3,
    "#": 4,
    "pl": 5,
    "p": 5,
}
_UNKNOWN_TAG_RANK = -1

_RELEASE_PREFIX = re.compile(r"^\d+(\.\d+)*")
_SEPARATORS = re.compile(r"[-_+]")
_DIGIT_BOUNDARY = re.compile(r"(?<=\d)(?=[^\d.])|(?<=[^\d.])(?=\d)")


def _normalize(value: str) -> str:
    return (value or "").strip().lstrip("vV")


def parse_version(value: str) -> Version:
    """Parse a plugin version, tolerating a leading ``v``."""
    return Version(_normalize(value))


def _segments(value: str) -> List[str]:
    # '1.0.2-beta3' -> ['1', '0', '2', 'beta', '3']
    value = _DIGIT_BOUNDARY.sub(".", _SEPARATORS.sub(".", value))
    return [part for part in value.split(".") if part]


def _rank(segment: str) -> int:
    if segment.isdigit():
        return _TAG_RANKS["#"]
    return _TAG_RANKS.get(segment.lower(), _UNKNOWN_TAG_RANK)


def _compare_segments(left: str, right: str) -> int:
    if left.isdigit() and right.isdigit():
        a, b = int(left), int(right)
    else:
        a, b = _rank(left), _rank(right)
    return (a > b) - (a < b)


def compare_versions(left: str, right: str) -> int:
    """Compare two tagged versions segment by segment; returns -1, 0 or 1.

    Handles tags PEP 440 rejects, e.g. '1.0.2-hotfix' or '1.0.2-alpha.beta'.
    A trailing number makes a version newer, a trailing tag makes it older
    unless the tag is 'pl' / 'p'.
    """
    for a, b in zip_longest(_segments(_normalize(left)), _segments(_normalize(right))):
        if a is None:
            return -1 if b.isdigit() else _compare_segments("#", b)
        if b is None:
            return 1 if a.isdigit() else _compare_segments(a, "#")
        result = _compare_segments(a, b)
        if result:
            return result
    return 0


def is_version_newer(current: str, candidate: str) -> bool:
    """Return True if ``candidate`` is strictly newer than ``current``.

    PEP 440 ordering is used where both versions parse; otherwise the
    segment comparison of :func:`compare_versions`. Versions that do not
    start with a numeric release never count as newer.
    """
    try:
        return parse_version(current) < parse_version(candidate)
    except InvalidVersion:
        pass

    if not (_RELEASE_PREFIX.match(_normalize(current)) and _RELEASE_PREFIX.match(_normalize(candidate))):
        logger.warning(f"Cannot compare versions '{current}' and '{candidate}'")
        return False

    return compare_versions(current, candidate) < 0
