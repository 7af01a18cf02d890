"""Reports built from the nodes of resolved dependency graphs.

:class:`NamespaceMigrationReport` finds third-party jars that still ship
classes in a legacy package namespace (``javax/`` by default) and are pulled
into the product through the project's own artifacts. It consumes the
``(node, ancestry)`` pairs produced by
:func:`flatten_bom._resolution.collector.walk`, so it can be fed either
directly or as the ``visit_callback`` of a
:class:`flatten_bom._resolution.collector.ClosureCollector`.
"""

import zipfile
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..coordinates import Gav
from ..exceptions import DependencyResolutionError, FileProcessingError, ResolverError
from ..logging_config import logger
from .collector import walk
from .models import DependencyNode, ResolutionRequest
from .protocol import ArtifactResolver

DEFAULT_PREFIX = "javax/"
PATH_SEPARATOR = "\n    -> "


class NamespaceMigrationReport:
    """Collects dependency paths leading to jars with legacy namespace entries.

    Only artifacts outside ``own_group`` and ``upstream_groups`` are
    inspected, and only when they are reached through one of the project's
    own artifacts without passing through an upstream artifact. Each
    reported path starts at the last own artifact on the way to the jar.

    Args:
        resolver: Used to locate artifact files
        own_group: groupId of the project's own artifacts
        upstream_groups: groupIds of platforms whose transitives are
            someone else's concern
        prefix: Entry name prefix marking the legacy namespace
        productized_only: Only inspect graphs of productized entry points
    """

    def __init__(
        self,
        resolver: ArtifactResolver,
        own_group: str,
        upstream_groups: Sequence[str] = (),
        prefix: str = DEFAULT_PREFIX,
        productized_only: bool = True,
    ) -> None:
        self._resolver = resolver
        self._own_group = own_group
        self._upstream_groups = tuple(upstream_groups)
        self._prefix = prefix
        self._productized_only = productized_only
        self._jar_cache: dict[Path, bool] = {}
        self._entries: set[str] = set()

    @property
    def entries(self) -> list[str]:
        """Reported dependency paths, sorted."""
        return sorted(self._entries)

    def _skipped(self, gav: Gav) -> bool:
        group_id = gav.group_id
        return group_id.startswith(self._own_group) or any(group_id.startswith(g) for g in self._upstream_groups)

    def _reached_via_own(self, ancestry: Sequence[Gav]) -> bool:
        groups = {gav.group_id for gav in ancestry}
        return self._own_group in groups and not any(g in groups for g in self._upstream_groups)

    def _contains_prefix(self, path: Path) -> bool:
        key = path.resolve()
        known = self._jar_cache.get(key)
        if known is not None:
            return known
        try:
            with zipfile.ZipFile(path) as jar:
                found = any(name.startswith(self._prefix) for name in jar.namelist())
        except (OSError, zipfile.BadZipFile) as e:
            raise FileProcessingError(f"Could not read {path}: {e}") from e
        self._jar_cache[key] = found
        return found

    def _trimmed_path(self, ancestry: Sequence[Gav]) -> str:
        path: list[Gav] = []
        for gav in ancestry:
            if gav.group_id == self._own_group:
                path.clear()
            path.append(gav)
        return PATH_SEPARATOR.join(str(gav) for gav in path)

    def __call__(
        self,
        node: DependencyNode,
        ancestry: Sequence[Gav],
        request: Optional[ResolutionRequest] = None,
    ) -> None:
        if self._productized_only and request is not None and not request.productized:
            return
        artifact = node.artifact
        if self._skipped(artifact) or not self._reached_via_own(ancestry):
            return
        try:
            path = self._resolver.resolve_artifact_file(artifact)
        except ResolverError as e:
            raise DependencyResolutionError(f"Could not resolve {artifact}: {e}") from e
        if path.name.endswith(".jar") and self._contains_prefix(path):
            logger.debug(f"{artifact} contains {self._prefix} entries")
            self._entries.add(self._trimmed_path(ancestry))

    def consume(self, roots: Iterable[DependencyNode]) -> "NamespaceMigrationReport":
        """Feed whole graphs to the report."""
        for root in roots:
            for node, ancestry in walk(root):
                self(node, ancestry)
        return self

    def render(self) -> str:
        return "\n\n".join(self.entries)
