"""BOM entry transformation and reduction."""

from .models import BomEntryTransformation, ManagedDependency, Provenance, parse_exclusions
from .reduction import ReductionResult, origin_exclude_set, origin_excluded, reduce_bom, transform_and_reduce
from .transform import apply_transformations, merge_transformations, transform_all

__all__ = [
    "BomEntryTransformation",
    "ManagedDependency",
    "Provenance",
    "parse_exclusions",
    "ReductionResult",
    "origin_excluded",
    "origin_exclude_set",
    "reduce_bom",
    "transform_and_reduce",
    "apply_transformations",
    "merge_transformations",
    "transform_all",
]
