"""Banned transitive dependencies."""

from ...coordinates import Ga
from ...logging_config import logger
from ...patterns import GavPattern
from ..models import CheckContext, Finding


def _exclusion_segment(segment: str, matched: str) -> str:
    # exclusions only understand a bare "*"
    return matched if "*" in segment and segment != "*" else segment


def exclusion_for(pattern: GavPattern, ga: Ga) -> Ga:
    """The exclusion keeping ``ga``, matched by a banned pattern, out.

    Literal and ``*`` segments of the pattern are kept; a segment with an
    embedded wildcard is replaced by the matched coordinate, so that a
    pattern like ``org.evil:evil-*`` yields one exclusion per matched artifact.
    """
    segments = str(pattern).split(":")
    artifact_segment = segments[1] if len(segments) > 1 else "*"
    return Ga(
        _exclusion_segment(segments[0], ga.group_id),
        _exclusion_segment(artifact_segment, ga.artifact_id),
    )


class BannedDependencyCheck:
    """No entry point may pull a banned dependency transitively.

    Findings are reported per entry point. With ``context.auto_fix``
    the missing exclusions are added to the entry point's BOM entry
    through ``context.pom_editor``; the findings are reported anyway.
    """

    @property
    def name(self) -> str:
        return "banned-dependencies"

    def check(self, context: CheckContext) -> list[Finding]:
        patterns = list(context.banned_patterns)
        if not patterns:
            return []
        logger.debug(f"Banned patterns {[str(p) for p in patterns]}")

        missing = {}
        for entry_point, transitives in context.transitives_by_entry_point.items():
            banned = sorted(
                {exclusion_for(pattern, ga) for ga in transitives for pattern in patterns if pattern.matches_ga(ga)}
            )
            if banned:
                missing[entry_point] = banned
        if not missing:
            return []

        fixed = context.auto_fix and context.pom_editor is not None
        if fixed:
            for entry_point, exclusions in missing.items():
                for exclusion in exclusions:
                    context.pom_editor.add_exclusion(entry_point.to_ga(), exclusion)
                context.fixed[entry_point] = exclusions
            context.pom_editor.save()

        hint = "the missing exclusions were added" if fixed else "run with --format to add the missing exclusions"
        return [
            Finding(
                rule=self.name,
                entries=(str(entry_point),) + tuple(str(ga) for ga in exclusions),
                detail=f"Missing exclusions in {context.bom_name}: {entry_point} pulls banned dependencies "
                f"[{', '.join(str(ga) for ga in exclusions)}]; {hint}",
            )
            for entry_point, exclusions in missing.items()
        ]
