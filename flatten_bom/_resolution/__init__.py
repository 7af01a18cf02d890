"""Dependency closure resolution.

This module selects the BOM entries whose dependency graphs need resolving,
collects their transitive closures through a pluggable artifact resolver
and offers reporting hooks over the resolved graphs.

Usage:
    from flatten_bom._resolution import ClosureCollector, collect_entry_points

    entry_points = collect_entry_points(bom, entry_point_set, registry)
    closure = ClosureCollector(resolver, managed_constraints=bom).resolve_closure(entry_points)
"""

from .collector import ClosureCollector, collect_partial, find_multiversioned, find_suspects, merge_partials, walk
from .entry_points import collect_entry_points, default_to_resolve, find_managed_version
from .models import Closure, DeclaredDependency, DependencyNode, ModuleInfo, PartialClosure, ResolutionRequest
from .protocol import ArtifactResolver, ModuleRegistry, PomEditor
from .reporting import NamespaceMigrationReport
from .resolvers import StaticGraphResolver

__all__ = [
    # Collection
    "ClosureCollector",
    "collect_partial",
    "merge_partials",
    "walk",
    "find_suspects",
    "find_multiversioned",
    # Entry points
    "collect_entry_points",
    "default_to_resolve",
    "find_managed_version",
    # Models
    "Closure",
    "DeclaredDependency",
    "DependencyNode",
    "ModuleInfo",
    "PartialClosure",
    "ResolutionRequest",
    # Protocols
    "ArtifactResolver",
    "ModuleRegistry",
    "PomEditor",
    # Implementations
    "NamespaceMigrationReport",
    "StaticGraphResolver",
]
