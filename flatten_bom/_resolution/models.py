"""Data models for dependency graph resolution."""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..coordinates import Ga, Gav, Gavtc


@dataclass(frozen=True)
class DependencyNode:
    """An immutable node of a resolved dependency graph.

    Attributes:
        artifact: Coordinates of the artifact at this node
        children: Direct dependencies of the artifact as resolved
    """

    artifact: Gav
    children: tuple["DependencyNode", ...] = ()


@dataclass(frozen=True)
class DeclaredDependency:
    """A dependency as declared in a module's own pom.xml.

    Values may still contain unevaluated ``${property}`` expressions; any
    attribute left out of the declaration is None.
    """

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    type: Optional[str] = None
    classifier: Optional[str] = None
    scope: Optional[str] = None


@dataclass(frozen=True)
class ModuleInfo:
    """A module of the project's own source tree.

    Attributes:
        ga: Coordinates of the module
        path: Path of the module's pom.xml relative to the source tree root
    """

    ga: Ga
    path: Optional[str] = None


@dataclass(frozen=True)
class ResolutionRequest:
    """An entry point to resolve, flagged by release track.

    Attributes:
        entry_point: Artifact whose transitive graph is collected
        productized: Whether the nodes reached count as productized
    """

    entry_point: Gavtc
    productized: bool = False


@dataclass(frozen=True)
class PartialClosure:
    """The transitive closure of a single entry point."""

    entry_point: Gavtc
    productized: bool
    gavs: frozenset[Gav] = frozenset()

    @property
    def gas(self) -> frozenset[Ga]:
        return frozenset(gav.to_ga() for gav in self.gavs)


@dataclass(frozen=True)
class Closure:
    """The merged closure of all resolved entry points.

    Attributes:
        all_gavs: Every artifact reached, with versions
        product_gavs: Artifacts reached from productized entry points, or
            None when no entry point was flagged as productized
        transitives_by_entry_point: Per entry point Gas, in resolution order
    """

    all_gavs: frozenset[Gav]
    product_gavs: Optional[frozenset[Gav]] = None
    transitives_by_entry_point: Mapping[Gavtc, frozenset[Ga]] = field(default_factory=dict)

    @property
    def all_gas(self) -> frozenset[Ga]:
        return frozenset(gav.to_ga() for gav in self.all_gavs)

    @property
    def product_gas(self) -> Optional[frozenset[Ga]]:
        if self.product_gavs is None:
            return None
        return frozenset(gav.to_ga() for gav in self.product_gavs)

    @property
    def community_gas(self) -> frozenset[Ga]:
        """Gas reached only from non-productized entry points."""
        return self.all_gas - (self.product_gas or frozenset())
