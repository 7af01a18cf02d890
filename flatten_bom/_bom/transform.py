"""Application of BOM entry transformations."""

import dataclasses
from pathlib import Path
from typing import Iterable, Sequence

from ..exceptions import FileProcessingError
from ..logging_config import logger
from .models import BomEntryTransformation, ManagedDependency

NON_PRODUCTIZED_DEPENDENCIES_FILE = "product/src/main/generated/transitive-dependencies-non-productized.txt"
STRIP_PRODUCT_SUFFIX = r"[\-\.]redhat-\d+$/"


def apply_transformations(
    dep: ManagedDependency,
    transformations: Sequence[BomEntryTransformation],
) -> ManagedDependency:
    """Apply every matching transformation to a managed dependency.

    Matching is evaluated against the entry as declared; all matching rules
    contribute (their version rewrites run in order and their exclusions are
    concatenated). Exclusions already present are not added twice, so
    re-applying the same rules to a transformed entry does not grow it.

    Args:
        dep: Entry to transform
        transformations: Candidate rules

    Returns:
        The transformed entry, or ``dep`` itself when no rule matches
    """
    matching = [t for t in transformations if t.matches(dep)]
    if not matching:
        return dep

    version = dep.version
    exclusions = list(dep.exclusions)
    for transformation in matching:
        version = transformation.replace_version(version)
        for exclusion in transformation.add_exclusions:
            if exclusion not in exclusions:
                exclusions.append(exclusion)

    return dataclasses.replace(dep, version=version, exclusions=tuple(exclusions))


def transform_all(
    deps: Iterable[ManagedDependency],
    transformations: Sequence[BomEntryTransformation],
) -> list[ManagedDependency]:
    """Apply transformations to a whole BOM, preserving declaration order."""
    if not transformations:
        return list(deps)
    return [apply_transformations(dep, transformations) for dep in deps]


def merge_transformations(
    root_dir: Path,
    transformations: Sequence[BomEntryTransformation],
    encoding: str = "utf-8",
) -> list[BomEntryTransformation]:
    """Prepend product-suffix stripping rules to the configured transformations.

    Every ``groupId:artifactId`` listed in the non-productized dependencies
    file (when it exists under ``root_dir``) gets a rule removing the
    ``-redhat-N``/``.redhat-N`` suffix from its managed version, so that
    community artifacts are not pinned to product builds.
    """
    result: list[BomEntryTransformation] = []
    path = root_dir / NON_PRODUCTIZED_DEPENDENCIES_FILE
    if path.is_file():
        try:
            lines = path.read_text(encoding=encoding).splitlines()
        except OSError as e:
            raise FileProcessingError(f"Could not read {path}: {e}") from e
        for line in lines:
            if line.strip():
                result.append(BomEntryTransformation.of(line.strip(), STRIP_PRODUCT_SUFFIX))
        logger.debug(f"Loaded {len(result)} product suffix transformations from {path}")
    result.extend(transformations)
    return result
