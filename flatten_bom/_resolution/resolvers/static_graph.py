"""Artifact resolver serving dependency graphs from a static adjacency map.

The adjacency map is keyed by ``groupId:artifactId:version`` or, for
artifacts whose dependencies do not depend on the version, by
``groupId:artifactId``. Children are written as ``groupId:artifactId:version``
or as ``groupId:artifactId``, in which case the version comes from the
managed constraints of the request.
"""

from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..._bom.models import ManagedDependency
from ...coordinates import Ga, Gav, Gavtc
from ...exceptions import ResolverError
from ...logging_config import logger
from ..models import DependencyNode


def _parse_ref(raw: str) -> tuple[Ga, Optional[str]]:
    parts = raw.strip().split(":")
    if len(parts) == 2 and all(parts):
        return Ga(parts[0], parts[1]), None
    if len(parts) == 3 and all(parts):
        return Ga(parts[0], parts[1]), parts[2]
    raise ResolverError(f"Invalid artifact reference '{raw}'; expected groupId:artifactId[:version]")


def _excluded(ga: Ga, exclusions: frozenset[Ga]) -> bool:
    return any(e.group_id in ("*", ga.group_id) and e.artifact_id in ("*", ga.artifact_id) for e in exclusions)


class StaticGraphResolver:
    """Builds dependency graphs from a fixed adjacency map.

    Managed constraints behave like Maven's dependency management: they
    override the versions of transitive dependencies and their exclusions
    prune the subtree below the managed artifact. Cycles are cut at the
    first repeated ``groupId:artifactId`` on a path. An artifact reached
    again under the same exclusions is expanded only once: the graph shares
    that node instead of copying it.

    Args:
        graphs: Adjacency map, see the module docstring
        files: Local artifact files keyed by ``groupId:artifactId:version``
        base_dir: Directory relative file paths are resolved against
        strict: Fail on artifacts missing from the adjacency map instead of
            treating them as leaves
    """

    def __init__(
        self,
        graphs: Mapping[str, Sequence[str]],
        files: Optional[Mapping[str, str]] = None,
        base_dir: Optional[Path] = None,
        strict: bool = False,
    ) -> None:
        self._by_gav: dict[Gav, list[str]] = {}
        self._by_ga: dict[Ga, list[str]] = {}
        for key, children in graphs.items():
            ga, version = _parse_ref(key)
            if version is None:
                self._by_ga[ga] = list(children)
            else:
                self._by_gav[Gav(ga.group_id, ga.artifact_id, version)] = list(children)
        self._files = dict(files or {})
        self._base_dir = base_dir or Path.cwd()
        self._strict = strict

    @classmethod
    def from_mapping(
        cls,
        graphs: Mapping[str, Sequence[str]],
        files: Optional[Mapping[str, str]] = None,
        base_dir: Optional[Path] = None,
    ) -> "StaticGraphResolver":
        return cls(graphs, files=files, base_dir=base_dir)

    def _children_of(self, gav: Gav) -> list[str]:
        if gav in self._by_gav:
            return self._by_gav[gav]
        ga = gav.to_ga()
        if ga in self._by_ga:
            return self._by_ga[ga]
        if self._strict:
            raise ResolverError(f"Artifact {gav} not found")
        return []

    def _build(
        self,
        gav: Gav,
        managed: Mapping[Ga, ManagedDependency],
        exclusions: frozenset[Ga],
        path: frozenset[Ga],
        built: dict[tuple[Gav, frozenset[Ga]], DependencyNode],
    ) -> DependencyNode:
        entry = managed.get(gav.to_ga())
        if entry is not None:
            exclusions = exclusions | frozenset(entry.exclusions)
        key = (gav, exclusions)
        if key in built:
            return built[key]
        children = []
        for ref in self._children_of(gav):
            ga, version = _parse_ref(ref)
            if ga in path or _excluded(ga, exclusions):
                continue
            constraint = managed.get(ga)
            if constraint is not None:
                version = constraint.version
            if version is None:
                raise ResolverError(f"No version for {ga} required by {gav}")
            child = Gav(ga.group_id, ga.artifact_id, version)
            children.append(self._build(child, managed, exclusions, path | {ga}, built))
        node = DependencyNode(gav, tuple(children))
        built[key] = node
        return node

    def collect_graph(
        self,
        root: Gavtc,
        managed_constraints: Sequence[ManagedDependency],
        direct_dependencies: Sequence[Gavtc] = (),
        repositories: Sequence[str] = (),
    ) -> DependencyNode:
        managed: dict[Ga, ManagedDependency] = {}
        for dep in managed_constraints:
            managed.setdefault(dep.ga, dep)

        root_gav = root.to_gav()
        built: dict[tuple[Gav, frozenset[Ga]], DependencyNode] = {}
        if not direct_dependencies:
            return self._build(root_gav, managed, frozenset(), frozenset({root.to_ga()}), built)

        logger.debug(f"Collecting {', '.join(str(d) for d in direct_dependencies)} under {root_gav}")
        children = tuple(
            self._build(dep.to_gav(), managed, frozenset(), frozenset({root.to_ga(), dep.to_ga()}), built)
            for dep in direct_dependencies
        )
        return DependencyNode(root_gav, children)

    def resolve_artifact_file(self, gav: Gav) -> Path:
        raw = self._files.get(str(gav))
        if raw is None:
            raise ResolverError(f"No file known for {gav}")
        path = Path(raw)
        if not path.is_absolute():
            path = self._base_dir / path
        if not path.is_file():
            raise ResolverError(f"File {path} of {gav} does not exist")
        return path
