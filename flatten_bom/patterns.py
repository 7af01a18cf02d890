"""Coordinate patterns and include/exclude coordinate sets.

A pattern has the form ``groupId[:artifactId[:version]]``. Each segment is
either a literal or a glob where ``*`` matches any (possibly empty) run of
characters, e.g. ``org.apache.*:camel-*``. Missing trailing segments match
anything.

Usage:
    from flatten_bom.patterns import CoordinateSet

    entry_points = CoordinateSet.build(
        includes=["org.acme:*"],
        excludes=["org.acme:*-deployment"],
    )
    entry_points.contains("org.acme", "acme-core")  # True
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Pattern

from .coordinates import Ga
from .exceptions import PatternSyntaxError

MAX_SEGMENTS = 3


def _compile_segment(segment: str) -> Optional[Pattern[str]]:
    """Compile a glob segment, returning None for the match-all ``*``."""
    if segment == "*":
        return None
    return re.compile("^" + ".*".join(re.escape(part) for part in segment.split("*")) + "$")


@dataclass(frozen=True)
class GavPattern:
    """A single ``groupId[:artifactId[:version]]`` glob pattern."""

    raw: str
    _segments: tuple = field(repr=False, compare=False)

    @classmethod
    def of(cls, raw: str) -> "GavPattern":
        """Parse a pattern.

        Raises:
            PatternSyntaxError: If the pattern is empty, has more than three
                segments or contains an empty segment.
        """
        if raw is None or not raw.strip():
            raise PatternSyntaxError("Empty coordinate pattern")
        text = raw.strip()
        segments = text.split(":")
        if len(segments) > MAX_SEGMENTS:
            raise PatternSyntaxError(
                f"Coordinate pattern '{raw}' has {len(segments)} segments; expected groupId[:artifactId[:version]]"
            )
        if any(not segment for segment in segments):
            raise PatternSyntaxError(f"Coordinate pattern '{raw}' contains an empty segment")
        while len(segments) < MAX_SEGMENTS:
            segments.append("*")
        return cls(text, tuple(_compile_segment(segment) for segment in segments))

    def matches(self, group_id: str, artifact_id: str, version: Optional[str] = None) -> bool:
        """Check whether the given coordinates match.

        The version segment is only checked when a version is supplied.
        """
        group_re, artifact_re, version_re = self._segments
        if group_re is not None and not group_re.match(group_id):
            return False
        if artifact_re is not None and not artifact_re.match(artifact_id):
            return False
        if version is not None and version_re is not None and not version_re.match(version):
            return False
        return True

    def matches_ga(self, ga: Ga) -> bool:
        return self.matches(ga.group_id, ga.artifact_id)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class CoordinateSet:
    """An include/exclude set of coordinates.

    Membership is ``(no includes OR some include matches) AND no exclude
    matches``. An empty include list therefore means "everything".
    """

    includes: tuple[GavPattern, ...] = ()
    excludes: tuple[GavPattern, ...] = ()
    _empty: bool = field(default=False, repr=False)

    @classmethod
    def build(
        cls,
        includes: Optional[Iterable[str]] = None,
        excludes: Optional[Iterable[str]] = None,
    ) -> "CoordinateSet":
        """Build a set from raw pattern strings.

        All patterns are parsed eagerly so that syntax errors surface here
        rather than on first query.
        """
        return cls(
            includes=tuple(GavPattern.of(p) for p in (includes or [])),
            excludes=tuple(GavPattern.of(p) for p in (excludes or [])),
        )

    @classmethod
    def match_all(cls) -> "CoordinateSet":
        return cls()

    @classmethod
    def empty(cls) -> "CoordinateSet":
        """A set that contains nothing."""
        return cls(_empty=True)

    def contains(self, group_id: str, artifact_id: str, version: Optional[str] = None) -> bool:
        if self._empty:
            return False
        if self.includes and not any(p.matches(group_id, artifact_id, version) for p in self.includes):
            return False
        return not any(p.matches(group_id, artifact_id, version) for p in self.excludes)

    def contains_ga(self, ga: Ga) -> bool:
        return self.contains(ga.group_id, ga.artifact_id)

    def __str__(self) -> str:
        if self._empty:
            return "CoordinateSet(<empty>)"
        includes = ",".join(str(p) for p in self.includes) or "*"
        excludes = ",".join(str(p) for p in self.excludes)
        return f"CoordinateSet(includes={includes}, excludes={excludes})"
