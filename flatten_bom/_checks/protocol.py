"""Consistency check protocol."""

from typing import Protocol

from .models import CheckContext, Finding


class ConsistencyCheck(Protocol):
    """A single structural rule evaluated against a flattened BOM.

    Checks only collect findings; whether a finding fails the run is
    decided by the policy afterwards.

    Example:
        class NoSnapshotsCheck:
            @property
            def name(self) -> str:
                return "no-snapshots"

            def check(self, context: CheckContext) -> list[Finding]:
                return [
                    Finding(self.name, (str(dep),), f"{dep} is a snapshot")
                    for dep in context.managed
                    if dep.version.endswith("-SNAPSHOT")
                ]
    """

    @property
    def name(self) -> str:
        """Rule name used in findings."""
        ...

    def check(self, context: CheckContext) -> list[Finding]:
        """Evaluate the rule.

        Args:
            context: Managed entries, modules and closures to check

        Returns:
            Findings, empty if the rule holds.
        """
        ...
