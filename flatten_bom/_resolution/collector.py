"""Transitive closure collection over resolved dependency graphs.

Graphs are obtained from an :class:`ArtifactResolver` and folded into
closures without any mutable visitor state:

- :func:`walk` lazily yields ``(node, ancestry)`` pairs in pre-order
- :func:`collect_partial` folds one entry point's graph into a
  :class:`PartialClosure`
- :func:`merge_partials` combines partial closures into a :class:`Closure`

:class:`ClosureCollector` drives the resolver for a list of entry points,
optionally in parallel, and merges the partial closures once all of them
are available, so the result does not depend on scheduling.

Example usage:
    collector = ClosureCollector(resolver, managed_constraints=bom)
    closure = collector.resolve_closure(entry_points)
    print(sorted(closure.all_gas))
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Iterator, Optional, Sequence

from .._bom.models import ManagedDependency
from ..coordinates import Ga, Gav, Gavtc
from ..exceptions import DependencyResolutionError, ResolverError
from ..logging_config import logger
from ..patterns import CoordinateSet, GavPattern
from .models import Closure, DependencyNode, PartialClosure, ResolutionRequest
from .protocol import ArtifactResolver

Ancestry = tuple[Gav, ...]
VisitCallback = Callable[[DependencyNode, Ancestry, ResolutionRequest], None]


def walk(root: DependencyNode) -> Iterator[tuple[DependencyNode, Ancestry]]:
    """Yield every node of a graph in pre-order with its ancestry.

    The ancestry is the path of coordinates from the root to the node, the
    node itself included. A node reachable through several paths is yielded
    once per path.
    """
    stack: list[tuple[DependencyNode, Ancestry]] = [(root, (root.artifact,))]
    while stack:
        node, ancestry = stack.pop()
        yield node, ancestry
        for child in reversed(node.children):
            stack.append((child, ancestry + (child.artifact,)))


def collect_partial(
    request: ResolutionRequest,
    root: DependencyNode,
    excludes: CoordinateSet,
) -> PartialClosure:
    """Fold one resolved graph into the closure of its entry point.

    Nodes matching ``excludes`` are not added, but their dependencies are
    still visited. A node shared by several parents is visited once.
    """
    gavs = set()
    seen: set[int] = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        artifact = node.artifact
        if not excludes.contains(artifact.group_id, artifact.artifact_id):
            gavs.add(artifact)
        stack.extend(node.children)
    return PartialClosure(entry_point=request.entry_point, productized=request.productized, gavs=frozenset(gavs))


def merge_partials(partials: Iterable[PartialClosure], classify: bool = False) -> Closure:
    """Merge per entry point closures.

    Args:
        partials: Partial closures in entry point order
        classify: Whether to compute the productized sub-closure; an
            artifact reached from any productized entry point counts as
            productized, whatever else pulls it

    Returns:
        The merged closure.
    """
    all_gavs: set[Gav] = set()
    product_gavs: set[Gav] = set()
    by_entry_point: dict[Gavtc, frozenset[Ga]] = {}
    for partial in partials:
        all_gavs |= partial.gavs
        if partial.productized:
            product_gavs |= partial.gavs
        by_entry_point[partial.entry_point] = by_entry_point.get(partial.entry_point, frozenset()) | partial.gas
    return Closure(
        all_gavs=frozenset(all_gavs),
        product_gavs=frozenset(product_gavs) if classify else None,
        transitives_by_entry_point=by_entry_point,
    )


def find_suspects(partial: PartialClosure, suspects: Sequence[GavPattern]) -> list[GavPattern]:
    """Return the watch patterns matched by any member of the closure."""
    gas = partial.gas
    return [pattern for pattern in suspects if any(pattern.matches_ga(ga) for ga in gas)]


def find_multiversioned(gavs: Iterable[Gav]) -> dict[Ga, list[str]]:
    """Find artifacts present in more than one version.

    Returns:
        Sorted mapping from Ga to its sorted versions, only for Gas with
        two or more versions.
    """
    versions: dict[Ga, set[str]] = {}
    for gav in gavs:
        versions.setdefault(gav.to_ga(), set()).add(gav.version)
    return {ga: sorted(vs) for ga, vs in sorted(versions.items()) if len(vs) > 1}


class ClosureCollector:
    """Resolves entry points and collects their transitive closures.

    Args:
        resolver: Artifact resolver building the graphs
        managed_constraints: Managed dependencies enforced during resolution
        excludes: Artifacts never added to a closure (e.g. the BOM's parent)
        root: Placeholder root artifact; when set, each entry point is
            resolved as a direct dependency of this root, otherwise the
            entry point itself is the root
        suspects: Watch patterns reported when pulled by an entry point
        repositories: Remote repositories passed to the resolver
        max_workers: Number of graphs resolved concurrently
        visit_callback: Called with every visited node and its ancestry
            after all graphs were resolved, in entry point order
    """

    def __init__(
        self,
        resolver: ArtifactResolver,
        managed_constraints: Sequence[ManagedDependency] = (),
        excludes: Optional[CoordinateSet] = None,
        root: Optional[Gavtc] = None,
        suspects: Iterable[str] = (),
        repositories: Sequence[str] = (),
        max_workers: int = 1,
        visit_callback: Optional[VisitCallback] = None,
    ) -> None:
        self._resolver = resolver
        self._constraints = list(managed_constraints)
        self._excludes = excludes or CoordinateSet.empty()
        self._root = root
        self._suspects = [GavPattern.of(s) for s in suspects]
        self._repositories = list(repositories)
        self._max_workers = max(1, max_workers)
        self._visit_callback = visit_callback

    def _collect_graph(self, request: ResolutionRequest) -> DependencyNode:
        entry_point = request.entry_point
        try:
            if self._root is None:
                return self._resolver.collect_graph(
                    entry_point, self._constraints, repositories=self._repositories
                )
            return self._resolver.collect_graph(
                self._root, self._constraints, direct_dependencies=[entry_point], repositories=self._repositories
            )
        except (ResolverError, ValueError) as e:
            raise DependencyResolutionError(f"Could not resolve dependencies of {entry_point}: {e}") from e

    def _resolve_one(self, request: ResolutionRequest) -> tuple[DependencyNode, PartialClosure]:
        logger.debug(f"Resolving {request.entry_point}")
        root = self._collect_graph(request)
        return root, collect_partial(request, root, self._excludes)

    def resolve_closure(
        self,
        entry_points: Sequence[Gavtc | ResolutionRequest],
        classify: bool = False,
    ) -> Closure:
        """Resolve all entry points and merge their closures.

        Args:
            entry_points: Plain coordinates or flagged resolution requests
            classify: Whether to compute the productized sub-closure

        Returns:
            The merged closure.

        Raises:
            DependencyResolutionError: If any graph cannot be collected
        """
        requests = [ep if isinstance(ep, ResolutionRequest) else ResolutionRequest(ep) for ep in entry_points]
        logger.info(f"Resolving {len(requests)} entry points with {self._max_workers} worker(s)")

        if self._max_workers == 1 or len(requests) < 2:
            results = [self._resolve_one(request) for request in requests]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                results = list(executor.map(self._resolve_one, requests))

        for root, partial in results:
            for pattern in find_suspects(partial, self._suspects):
                logger.warning(f"Suspect {pattern} pulled via {partial.entry_point}")
            if self._visit_callback is not None:
                request = ResolutionRequest(partial.entry_point, partial.productized)
                for node, ancestry in walk(root):
                    self._visit_callback(node, ancestry, request)

        closure = merge_partials((partial for _, partial in results), classify=classify)
        logger.info(f"Collected {len(closure.all_gas)} transitive artifacts")
        return closure
