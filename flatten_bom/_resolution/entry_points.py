"""Selection of the BOM entries whose dependency graphs get resolved."""

from typing import Callable, Iterable, Optional, Sequence

from .._bom.models import ManagedDependency
from ..coordinates import DEFAULT_TYPE, Gavtc
from ..exceptions import UnresolvedVersionError
from ..logging_config import logger
from ..patterns import CoordinateSet
from .models import DeclaredDependency
from .protocol import ModuleRegistry

WANTED_SCOPES = frozenset({"compile", "provided"})
DEFAULT_SCOPE = "compile"


def default_to_resolve(excluded_groups: Iterable[str]) -> CoordinateSet:
    """Dependencies that must be resolved: everything outside the given groups.

    Artifacts of the project's own group and of the platform it builds on
    are assumed to be resolved already.
    """
    return CoordinateSet.build(excludes=sorted(set(excluded_groups)))


def _same(declared: Optional[str], managed: Optional[str], default: str) -> bool:
    return (declared or default) == (managed or default)


def find_managed_version(
    managed: Sequence[ManagedDependency],
    group_id: str,
    artifact_id: str,
    type: Optional[str],
    classifier: Optional[str],
) -> Optional[str]:
    """Look up the version of an artifact in the managed dependencies.

    The first entry with the same groupId, artifactId, type (default jar)
    and classifier (default empty) wins.
    """
    for dep in managed:
        if (
            dep.group_id == group_id
            and dep.artifact_id == artifact_id
            and _same(type, dep.type, DEFAULT_TYPE)
            and _same(classifier, dep.classifier, "")
        ):
            return dep.version
    return None


def _expand_module(
    declared: Iterable[DeclaredDependency],
    managed: Sequence[ManagedDependency],
    evaluate: Callable[[str], str],
    to_resolve: CoordinateSet,
    module: str,
) -> list[Gavtc]:
    result = []
    for dep in declared:
        if (dep.scope or DEFAULT_SCOPE) not in WANTED_SCOPES:
            continue
        group_id = evaluate(dep.group_id)
        artifact_id = evaluate(dep.artifact_id)
        type = dep.type or DEFAULT_TYPE
        classifier = evaluate(dep.classifier) if dep.classifier else ""
        version = find_managed_version(managed, group_id, artifact_id, type, classifier)
        if version is None:
            raise UnresolvedVersionError(
                f"No managed version found for {group_id}:{artifact_id}:{type}"
                + (f":{classifier}" if classifier else "")
                + f" declared in module {module}"
            )
        if to_resolve.contains(group_id, artifact_id):
            result.append(Gavtc(group_id, artifact_id, version, type, classifier))
    return result


def collect_entry_points(
    managed: Sequence[ManagedDependency],
    entry_point_set: CoordinateSet,
    registry: ModuleRegistry,
    active_profiles: Sequence[str] = (),
    to_resolve: Optional[CoordinateSet] = None,
) -> list[Gavtc]:
    """Compute the resolution entry points.

    Each managed entry matching ``entry_point_set`` is used as-is when it is
    an external artifact. Entries pointing at one of the project's own
    modules are expanded to that module's ``compile`` and ``provided``
    dependencies, versioned from ``managed`` and filtered by ``to_resolve``.

    Args:
        managed: The full list of managed dependencies
        entry_point_set: Selects the entries to resolve
        registry: The project's module registry
        active_profiles: Profiles used when reading module dependencies
        to_resolve: Which expanded module dependencies need resolving;
            everything when None

    Returns:
        Entry points in first-seen order, without duplicates.

    Raises:
        UnresolvedVersionError: If an expanded dependency has no managed version
    """
    to_resolve = to_resolve or CoordinateSet.match_all()
    modules = registry.modules_by_ga()
    evaluate = registry.expression_evaluator(active_profiles)
    result: dict[Gavtc, None] = {}

    for dep in managed:
        if not entry_point_set.contains(dep.group_id, dep.artifact_id, dep.version):
            continue
        if dep.ga not in modules:
            result.setdefault(dep.gavtc, None)
            continue
        declared = registry.own_dependencies_of(dep.ga, active_profiles)
        for entry_point in _expand_module(declared, managed, evaluate, to_resolve, str(dep.ga)):
            result.setdefault(entry_point, None)

    logger.info(f"Selected {len(result)} resolution entry points")
    for entry_point in result:
        logger.debug(f" - {entry_point}")
    return list(result)
