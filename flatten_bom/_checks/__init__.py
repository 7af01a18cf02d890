"""Structural consistency checks of a flattened BOM.

Usage:
    from flatten_bom._checks import CheckContext, OnFailure, check

    findings = check(context, OnFailure.WARN)
"""

from typing import Optional

from .checks import BannedDependencyCheck, ManagedGroupDiffCheck, RuntimeDeploymentPairingCheck, StaleModuleCheck
from .models import CheckContext, Finding, OnFailure
from .policy import enforce_policy, format_findings
from .protocol import ConsistencyCheck
from .registry import CheckRegistry


def create_default_registry() -> CheckRegistry:
    """Create a registry with the built-in checks in evaluation order."""
    registry = CheckRegistry()
    registry.register(StaleModuleCheck())
    registry.register(RuntimeDeploymentPairingCheck())
    registry.register(ManagedGroupDiffCheck())
    registry.register(BannedDependencyCheck())
    return registry


def check(
    context: CheckContext,
    on_failure: OnFailure | str = OnFailure.FAIL,
    registry: Optional[CheckRegistry] = None,
) -> list[Finding]:
    """Run all checks and apply the failure policy once.

    Raises:
        ConsistencyViolationError: Under ``FAIL`` when any check reports findings
    """
    registry = registry or create_default_registry()
    return enforce_policy(registry.run_all(context), on_failure)


__all__ = [
    "BannedDependencyCheck",
    "CheckContext",
    "CheckRegistry",
    "ConsistencyCheck",
    "Finding",
    "ManagedGroupDiffCheck",
    "OnFailure",
    "RuntimeDeploymentPairingCheck",
    "StaleModuleCheck",
    "check",
    "create_default_registry",
    "enforce_policy",
    "format_findings",
]
