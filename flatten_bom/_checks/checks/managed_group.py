"""Exact match of required and managed third-party artifacts."""

import difflib

from ..models import CheckContext, Finding


class ManagedGroupDiffCheck:
    """Entries of selected third-party groups must be exactly the required ones.

    For each group in ``context.diff_groups`` the sorted Gas pulled
    transitively are compared with the sorted Gas managed in the BOM; any
    difference is reported as a unified diff.
    """

    @property
    def name(self) -> str:
        return "managed-group-diff"

    def check(self, context: CheckContext) -> list[Finding]:
        findings = []
        for group_id in context.diff_groups:
            required = sorted(str(ga) for ga in context.closure.all_gas if ga.group_id == group_id)
            managed = sorted({str(dep.ga) for dep in context.managed if dep.group_id == group_id})
            if required == managed:
                continue
            diff = list(difflib.unified_diff(required, managed, fromfile="required", tofile="managed", lineterm=""))
            changes = tuple(line for line in diff[2:] if line.startswith(("+", "-")))
            findings.append(
                Finding(
                    rule=self.name,
                    entries=changes,
                    detail=f"Too little or too much {group_id}:* entries in {context.bom_name}:\n\n    "
                    + "\n    ".join(diff)
                    + "\n\nConsider adding, removing or excluding them in the BOM",
                )
            )
        return findings
