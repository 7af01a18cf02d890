"""Checks of the BOM entries for the project's own modules."""

from ...coordinates import Ga
from ..models import CheckContext, Finding

PROJECT_VERSION_EXPRESSION = "${project.version}"


def _indent(gas) -> str:
    return "\n    ".join(str(ga) for ga in gas)


class StaleModuleCheck:
    """Own artifacts managed at the project version must still exist as modules."""

    @property
    def name(self) -> str:
        return "stale-modules"

    def check(self, context: CheckContext) -> list[Finding]:
        versions = {context.project_version, PROJECT_VERSION_EXPRESSION}
        stale = sorted(
            {
                dep.ga
                for dep in context.managed
                if dep.group_id in context.own_groups
                and dep.version in versions
                and dep.ga not in context.module_gas
            }
        )
        if not stale:
            return []
        return [
            Finding(
                rule=self.name,
                entries=tuple(str(ga) for ga in stale),
                detail=(
                    f"Please remove these non-existent entries managed in {context.bom_name}:\n\n    {_indent(stale)}"
                ),
            )
        ]


class RuntimeDeploymentPairingCheck:
    """Runtime and deployment artifacts of an extension must be managed together.

    A managed deployment artifact always requires its runtime artifact. A
    managed runtime artifact requires its deployment artifact only when a
    deployment module exists in the source tree.
    """

    @property
    def name(self) -> str:
        return "runtime-deployment-pairing"

    def check(self, context: CheckContext) -> list[Finding]:
        suffix = context.deployment_suffix
        managed = context.own_managed_gas()
        managed_set = set(managed)

        missing_runtime = [
            Ga(ga.group_id, ga.artifact_id[: -len(suffix)])
            for ga in managed
            if ga.artifact_id.endswith(suffix)
        ]
        missing_runtime = [ga for ga in missing_runtime if ga not in managed_set]

        missing_deployment = [
            Ga(ga.group_id, ga.artifact_id + suffix) for ga in managed if not ga.artifact_id.endswith(suffix)
        ]
        missing_deployment = [
            ga for ga in missing_deployment if ga not in managed_set and ga in context.module_gas
        ]

        findings = []
        if missing_runtime:
            findings.append(
                Finding(
                    rule=self.name,
                    entries=tuple(str(ga) for ga in missing_runtime),
                    detail=f"Missing runtime entries; please add these to {context.bom_name}:\n\n    "
                    f"{_indent(missing_runtime)}",
                )
            )
        if missing_deployment:
            findings.append(
                Finding(
                    rule=self.name,
                    entries=tuple(str(ga) for ga in missing_deployment),
                    detail=f"Missing deployment entries; please add these to {context.bom_name}:\n\n    "
                    f"{_indent(missing_deployment)}",
                )
            )
        return findings
