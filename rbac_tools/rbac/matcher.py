"""Wildcard matching for slash-segmented RBAC permission strings

Grammar:
- Comparison is case-insensitive.
- ``*`` on its own matches every permission.
- A trailing ``/*`` matches the prefix segments followed by zero or more
  further segments, so ``Microsoft.Storage/*`` covers
  ``Microsoft.Storage/storageAccounts/read``.
- ``*`` in any other segment position stands for exactly one segment, so
  ``*/read`` covers ``Microsoft.Billing/read`` but not
  ``Microsoft.Compute/virtualMachines/read``.
- A ``*`` embedded in a longer segment is an ordinary character.

Only the pattern side expands. ``matches("A/B/read", "A/*")`` is False.

Example:
    matches("Microsoft.Compute/*", "Microsoft.Compute/virtualMachines/read")  # True
    matches("*", "anything/at/all")  # True
"""

from functools import lru_cache
from typing import Tuple

WILDCARD = "*"
SEGMENT_SEPARATOR = "/"


@lru_cache(maxsize=8192)
def split_segments(permission: str) -> Tuple[str, ...]:
    """Lower-cased segments of a permission string"""
    return tuple(permission.lower().split(SEGMENT_SEPARATOR))


def _segments_match(pattern_segments: Tuple[str, ...], candidate_segments: Tuple[str, ...]) -> bool:
    for pattern_segment, candidate_segment in zip(pattern_segments, candidate_segments):
        if pattern_segment != WILDCARD and pattern_segment != candidate_segment:
            return False
    return True


def matches(pattern: str, candidate: str) -> bool:
    """
    Check whether ``pattern`` covers ``candidate``.

    Args:
        pattern: Granted or excluded permission, possibly with wildcards
        candidate: Permission being checked; its ``*`` characters are literal

    Returns:
        True if the pattern covers the candidate. Empty or non-string input
        yields False.
    """
    if not isinstance(pattern, str) or not isinstance(candidate, str):
        return False
    if not pattern or not candidate:
        return False

    pattern_segments = split_segments(pattern)
    candidate_segments = split_segments(candidate)

    if pattern_segments == candidate_segments:
        return True

    if pattern_segments == (WILDCARD,):
        return True

    if len(pattern_segments) > 1 and pattern_segments[-1] == WILDCARD:
        prefix = pattern_segments[:-1]
        if len(candidate_segments) < len(prefix):
            return False
        return _segments_match(prefix, candidate_segments)

    if len(pattern_segments) != len(candidate_segments):
        return False
    return _segments_match(pattern_segments, candidate_segments)


def has_wildcard(permission: str) -> bool:
    """True if any segment of the permission is the ``*`` token"""
    return WILDCARD in split_segments(permission)


def namespace_of(permission: str) -> str:
    """
    Top-level namespace of a permission, lower-cased.

    Example: "Microsoft.Storage/storageAccounts/read" -> "microsoft.storage"
    """
    if not permission:
        return ""
    return split_segments(permission)[0]
