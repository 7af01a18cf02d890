"""Built-in consistency checks."""

from .banned import BannedDependencyCheck, exclusion_for
from .managed_group import ManagedGroupDiffCheck
from .modules import RuntimeDeploymentPairingCheck, StaleModuleCheck

__all__ = [
    "BannedDependencyCheck",
    "ManagedGroupDiffCheck",
    "RuntimeDeploymentPairingCheck",
    "StaleModuleCheck",
    "exclusion_for",
]
