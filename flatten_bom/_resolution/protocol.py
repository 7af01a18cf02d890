"""Protocol definitions for the collaborators of the resolution engine.

The engine never parses pom.xml files or talks to Maven repositories
itself. It works against these protocols, so that a real Maven backed
implementation, the workspace descriptor adapter or a synthetic graph in a
test can all be plugged in.
"""

from pathlib import Path
from typing import Callable, Mapping, Protocol, Sequence

from .._bom.models import ManagedDependency
from ..coordinates import Ga, Gav, Gavtc
from .models import DeclaredDependency, DependencyNode, ModuleInfo


class ModuleRegistry(Protocol):
    """The module graph of the project's own source tree.

    Example:
        class WorkspaceModuleRegistry:
            def modules_by_ga(self):
                return {Ga("org.acme", "acme-core"): ModuleInfo(...)}

            def own_dependencies_of(self, ga, active_profiles):
                return [DeclaredDependency("org.acme", "acme-api", scope="compile")]

            def expression_evaluator(self, active_profiles):
                return lambda expression: expression
    """

    def modules_by_ga(self) -> Mapping[Ga, ModuleInfo]:
        """All modules of the source tree keyed by their coordinates."""
        ...

    def own_dependencies_of(self, ga: Ga, active_profiles: Sequence[str]) -> list[DeclaredDependency]:
        """Dependencies declared directly in the given module.

        Args:
            ga: Coordinates of one of the modules
            active_profiles: Ids of the profiles to consider active

        Returns:
            Declared dependencies, property expressions left unevaluated.
        """
        ...

    def expression_evaluator(self, active_profiles: Sequence[str]) -> Callable[[str], str]:
        """A function evaluating ``${property}`` expressions in the source tree."""
        ...


class ArtifactResolver(Protocol):
    """Builds dependency graphs for artifacts.

    Implementations raise :class:`flatten_bom.exceptions.ResolverError` when a
    graph cannot be collected; the engine does not retry.
    """

    def collect_graph(
        self,
        root: Gavtc,
        managed_constraints: Sequence[ManagedDependency],
        direct_dependencies: Sequence[Gavtc] = (),
        repositories: Sequence[str] = (),
    ) -> DependencyNode:
        """Collect the transitive dependency graph of an artifact.

        Args:
            root: Root artifact of the request
            managed_constraints: Versions and exclusions to enforce
            direct_dependencies: Dependencies added to the root, when the
                root itself is only a placeholder
            repositories: Remote repository URLs

        Returns:
            The root node of the resolved graph.
        """
        ...

    def resolve_artifact_file(self, gav: Gav) -> Path:
        """Resolve an artifact to a local file.

        Only used by reporting hooks that need to inspect artifact content.
        """
        ...


class PomEditor(Protocol):
    """In-place editor of the BOM's pom.xml used by automatic fixes."""

    def add_exclusion(self, entry: Ga, exclusion: Ga) -> bool:
        """Add an exclusion to the managed entries matching ``entry``.

        The exclusion is inserted at its sorted position; nothing happens
        when it is already present.

        Returns:
            True if the document was changed.
        """
        ...

    def set_version(self, entry: Ga, version: str) -> bool:
        """Set the version of the managed entries matching ``entry``.

        Returns:
            True if the document was changed.
        """
        ...

    def save(self) -> bool:
        """Write the document back if it changed; returns whether it was written."""
        ...
