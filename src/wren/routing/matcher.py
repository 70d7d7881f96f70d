"""Segment-wise path matching.

Patterns and paths are compared one ``/``-separated segment at a time.
A ``{name}`` segment captures whatever single segment sits at the same
position; every other segment must be equal. Placeholders never span
segments, so matching is linear in the segment count.
"""

import re

from wren.routing.route import NO_MATCH, MatchResult

# Characters kept by URL sanitizing; everything else is dropped.
_UNSAFE_URL_CHARS = re.compile(r"[^A-Za-z0-9$\-_.+!*'(),{}|\\^~\[\]`<>#%\";/?:@&=]")


def normalize_path(raw: str) -> str:
    """Canonical form used for every comparison.

    Strips leading and trailing slashes and removes characters that are
    not URL-safe::

        "/user/21/"   -> "user/21"
        "/"           -> ""
        "/a b/c"      -> "ab/c"
    """
    return _UNSAFE_URL_CHARS.sub("", raw.strip("/"))


def is_placeholder(segment: str) -> bool:
    """True for a ``{name}`` pattern segment."""
    return len(segment) >= 2 and segment.startswith("{") and segment.endswith("}")


def placeholders(pattern: str) -> list[str]:
    """Placeholder names of *pattern*, in order of appearance."""
    return [seg[1:-1] for seg in normalize_path(pattern).split("/") if is_placeholder(seg)]


def match_path(pattern: str, path: str) -> MatchResult:
    """Match a normalized *path* against a normalized *pattern*.

    Both inputs are expected in the form produced by ``normalize_path``.
    The empty pattern is the root route and matches only the empty path.
    """
    pattern_segments = pattern.split("/")
    path_segments = path.split("/")
    if len(pattern_segments) != len(path_segments):
        return NO_MATCH

    params: list[str] = []
    for expected, actual in zip(pattern_segments, path_segments, strict=True):
        if is_placeholder(expected):
            params.append(actual)
        elif expected != actual:
            return NO_MATCH
    return MatchResult(matched=True, params=tuple(params))
