"""Data models for BOM consistency checks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from .._bom.models import ManagedDependency
from .._resolution.models import Closure
from .._resolution.protocol import PomEditor
from ..coordinates import Ga, Gavtc
from ..exceptions import ConfigurationError
from ..patterns import GavPattern

DEPLOYMENT_SUFFIX = "-deployment"


class OnFailure(str, Enum):
    """What to do when consistency checks report findings."""

    FAIL = "FAIL"
    WARN = "WARN"
    IGNORE = "IGNORE"

    @classmethod
    def of(cls, value: "str | OnFailure") -> "OnFailure":
        """Parse a policy name, case-insensitively."""
        if isinstance(value, OnFailure):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ConfigurationError(f"Invalid on-failure policy '{value}'. Valid values: {valid}") from None


@dataclass(frozen=True)
class Finding:
    """A single consistency problem.

    Attributes:
        rule: Name of the check that reported the problem
        entries: Affected coordinates or diff lines
        detail: Human readable description, including what to do about it
    """

    rule: str
    entries: tuple[str, ...]
    detail: str

    def __str__(self) -> str:
        return f"[{self.rule}] {self.detail}"


@dataclass
class CheckContext:
    """Everything the checks are evaluated against.

    Attributes:
        managed: Managed entries of the BOM after transformations
        module_gas: Coordinates of the modules in the source tree
        own_groups: groupIds of the project's own artifacts
        project_version: Version of the project's own artifacts
        closure: Merged closure of all entry points
        bom_name: Name of the BOM used in messages
        diff_groups: Third-party groupIds whose managed entries must
            match the required ones exactly
        banned_patterns: Dependencies that must not be pulled transitively
        deployment_suffix: artifactId suffix of deployment artifacts
        pom_editor: Editor used to add missing exclusions
        auto_fix: Whether to add missing exclusions through ``pom_editor``
    """

    managed: Sequence[ManagedDependency]
    module_gas: frozenset[Ga]
    own_groups: frozenset[str]
    project_version: str
    closure: Closure
    bom_name: str = "bom"
    diff_groups: Sequence[str] = ()
    banned_patterns: Sequence[GavPattern] = ()
    deployment_suffix: str = DEPLOYMENT_SUFFIX
    pom_editor: Optional[PomEditor] = None
    auto_fix: bool = False
    fixed: dict[Gavtc, list[Ga]] = field(default_factory=dict)

    @property
    def transitives_by_entry_point(self) -> Mapping[Gavtc, frozenset[Ga]]:
        return self.closure.transitives_by_entry_point

    def own_managed_gas(self) -> list[Ga]:
        """Sorted distinct Gas of managed entries in one of the own groups."""
        return sorted({dep.ga for dep in self.managed if dep.group_id in self.own_groups})
