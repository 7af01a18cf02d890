"""Reduction of a full BOM to the entries a project requires."""

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional, Sequence

from ..coordinates import Ga
from ..logging_config import logger
from ..patterns import CoordinateSet
from .models import BomEntryTransformation, ManagedDependency
from .transform import transform_all


@dataclass
class ReductionResult:
    """Output of a BOM reduction.

    Attributes:
        full: Every managed entry after transformations, in declaration order
        reduced: Entries surviving the origin and closure filters
        dropped_by_origin: Entries whose declaring BOM is origin-excluded
        dropped_as_unused: Entries not required by the closure
    """

    full: list[ManagedDependency]
    reduced: list[ManagedDependency]
    dropped_by_origin: list[ManagedDependency]
    dropped_as_unused: list[ManagedDependency]


def origin_excluded(dep: ManagedDependency, excluded_by_origin: CoordinateSet) -> bool:
    """Check whether the entry was declared in an origin-excluded BOM."""
    if dep.provenance is None:
        return False
    gav = dep.provenance.gav()
    if gav is None:
        return False
    return excluded_by_origin.contains(gav.group_id, gav.artifact_id, gav.version)


def origin_exclude_set(origin_excludes: Optional[Iterable[str]]) -> CoordinateSet:
    """Build the set of declaring BOMs whose entries are dropped.

    Unlike a general :class:`CoordinateSet`, no patterns means that no
    origin is excluded.
    """
    patterns = list(origin_excludes or [])
    if not patterns:
        return CoordinateSet.empty()
    return CoordinateSet.build(includes=patterns)


def reduce_bom(
    full: Sequence[ManagedDependency],
    required_gas: AbstractSet[Ga],
    module_gas: AbstractSet[Ga],
    excluded_by_origin: CoordinateSet,
) -> ReductionResult:
    """Filter a (transformed) BOM down to the required entries.

    An entry survives when its declaring BOM is not origin-excluded and its
    ``groupId:artifactId`` is either in the required closure or one of the
    project's own modules. Declaration order is preserved.
    """
    reduced: list[ManagedDependency] = []
    dropped_by_origin: list[ManagedDependency] = []
    dropped_as_unused: list[ManagedDependency] = []
    for dep in full:
        if origin_excluded(dep, excluded_by_origin):
            dropped_by_origin.append(dep)
        elif dep.ga in required_gas or dep.ga in module_gas:
            reduced.append(dep)
        else:
            dropped_as_unused.append(dep)

    logger.info(
        f"Reduced BOM from {len(full)} to {len(reduced)} entries "
        f"({len(dropped_by_origin)} managed elsewhere, {len(dropped_as_unused)} not required)"
    )
    return ReductionResult(
        full=list(full),
        reduced=reduced,
        dropped_by_origin=dropped_by_origin,
        dropped_as_unused=dropped_as_unused,
    )


def transform_and_reduce(
    original: Sequence[ManagedDependency],
    required_gas: AbstractSet[Ga],
    module_gas: AbstractSet[Ga],
    origin_excludes: Optional[Iterable[str]] = None,
    transformations: Sequence[BomEntryTransformation] = (),
) -> ReductionResult:
    """Apply transformations to the original BOM and reduce it in one step."""
    full = transform_all(original, transformations)
    return reduce_bom(full, required_gas, module_gas, origin_exclude_set(origin_excludes))
