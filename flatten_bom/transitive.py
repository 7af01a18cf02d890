"""Lists of the transitive dependencies of a project's extensions.

The project's own BOM entries are versioned either with the product
version property or with the community version property. Resolving the
extensions of both tracks tells which third-party artifacts are pulled by
productized extensions and which only by community ones. Three sorted
``groupId:artifactId`` lists are written:

- all transitive dependencies,
- the productized ones,
- the rest, which need neither productization nor alignment.

Example usage:
    task = TransitiveDependencies(
        resolver=workspace.resolver(),
        managed=workspace.bom,
        own_group="org.acme",
        product_version="2.0.0.redhat-00001",
        community_version="2.0.0",
    )
    result = task.execute()
    task.write(result, base_dir)
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from ._bom.models import ManagedDependency
from ._bom.transform import NON_PRODUCTIZED_DEPENDENCIES_FILE
from ._resolution.collector import ClosureCollector, find_multiversioned
from ._resolution.models import ResolutionRequest
from ._resolution.protocol import ArtifactResolver, PomEditor
from ._resolution.reporting import NamespaceMigrationReport
from .coordinates import Ga, Gavtc
from .exceptions import ConfigurationError, ConsistencyViolationError
from .logging_config import logger
from .output import write_if_changed
from .patterns import CoordinateSet
from .serialization import serialize_ga_list

ALL_DEPENDENCIES_FILE = "product/src/main/generated/transitive-dependencies-all.txt"
PRODUCTIZED_DEPENDENCIES_FILE = "product/src/main/generated/transitive-dependencies-productized.txt"

IMPORT_SCOPE = "import"


@dataclass
class TransitiveDependenciesResult:
    """Classified transitive dependencies.

    Attributes:
        all_gas: Every transitive dependency and every managed entry
        productized_gas: Dependencies of productized extensions
        multiversioned: Productized dependencies resolved in several versions
        unmappable: Managed entries that could not be classified
        namespace_report: Entries of the namespace migration report, if any
        platform_updates: Platform entries whose BOM version expression
            has to change, mapped to the expected expression
    """

    all_gas: set[Ga]
    productized_gas: set[Ga]
    multiversioned: dict[Ga, list[str]] = field(default_factory=dict)
    unmappable: list[Ga] = field(default_factory=list)
    namespace_report: Optional[list[str]] = None
    platform_updates: dict[Ga, str] = field(default_factory=dict)

    @property
    def non_productized_gas(self) -> set[Ga]:
        return self.all_gas - self.productized_gas


def parse_additional_dependencies(raw: Mapping[str, str | Sequence[str]]) -> dict[str, CoordinateSet]:
    """Build extension to pattern set mappings from ``artifactId: patterns``.

    Patterns may be given as a list or as a comma separated string.
    """
    result = {}
    for artifact_id, patterns in raw.items():
        if isinstance(patterns, str):
            patterns = [p.strip() for p in patterns.split(",") if p.strip()]
        result[artifact_id] = CoordinateSet.build(includes=list(patterns))
    return result


class TransitiveDependencies:
    """Computes the productized and non-productized transitive dependencies.

    Args:
        resolver: Artifact resolver building the graphs
        managed: Entries of the project's BOM
        own_group: groupId of the project's own artifacts
        product_version: Version of productized extensions
        community_version: Version of community extensions
        product_version_expression: Version of productized own entries in the BOM
        community_version_expression: Version of community own entries in the BOM
        additional_extension_dependencies: Extension artifactId to the
            managed entries it pulls in ways the resolver cannot see (e.g. shaded)
        platform_group: groupId whose transitives must all be managed
        platform_version_expressions: Product and community version
            expressions of platform entries in the BOM
        managed_constraints: Managed dependencies enforced during
            resolution; by default the BOM entries with their versions
            evaluated
        evaluate: Evaluator of ``${property}`` expressions in the versions
            of entries other than the own ones
        namespace_report: Optional report fed with the productized graphs
        max_workers: Number of graphs resolved concurrently
    """

    def __init__(
        self,
        resolver: ArtifactResolver,
        managed: Sequence[ManagedDependency],
        own_group: str,
        product_version: str,
        community_version: str,
        product_version_expression: str = "${project.version}",
        community_version_expression: str = "${community.version}",
        additional_extension_dependencies: Optional[Mapping[str, CoordinateSet]] = None,
        platform_group: Optional[str] = None,
        platform_version_expressions: tuple[str, str] = ("${platform.version}", "${platform-community.version}"),
        managed_constraints: Optional[Sequence[ManagedDependency]] = None,
        evaluate: Optional[Callable[[str], str]] = None,
        namespace_report: Optional[NamespaceMigrationReport] = None,
        max_workers: int = 1,
    ) -> None:
        self.resolver = resolver
        self.managed = list(managed)
        self.own_group = own_group
        self.product_version = product_version
        self.community_version = community_version
        self.product_version_expression = product_version_expression
        self.community_version_expression = community_version_expression
        self.additional_extension_dependencies = dict(additional_extension_dependencies or {})
        self.platform_group = platform_group
        self.platform_version_expressions = platform_version_expressions
        self.evaluate = evaluate
        self.managed_constraints = (
            list(managed_constraints) if managed_constraints is not None else self.evaluated_constraints()
        )
        self.namespace_report = namespace_report
        self.max_workers = max_workers

    def _bom_entries(self) -> list[ManagedDependency]:
        return [dep for dep in self.managed if dep.scope != IMPORT_SCOPE]

    def _evaluated_version(self, dep: ManagedDependency) -> str:
        if dep.group_id == self.own_group:
            if dep.version == self.product_version_expression:
                return self.product_version
            if dep.version == self.community_version_expression:
                return self.community_version
        if self.evaluate is None:
            return dep.version
        return self.evaluate(dep.version)

    def evaluated_constraints(self) -> list[ManagedDependency]:
        """The BOM entries with the versions a build of the BOM would have.

        Own entries get the product or community version according to
        their version expression; other expressions go through ``evaluate``.
        """
        constraints = []
        for dep in self.managed:
            version = self._evaluated_version(dep)
            constraints.append(dep if version == dep.version else replace(dep, version=version))
        return constraints

    def collect_artifact_ids(self) -> dict[str, bool]:
        """Own artifactIds to resolve, mapped to whether they are productized.

        Runtime artifacts whose deployment counterpart is also managed are
        dropped, because the deployment artifact pulls them anyway.

        Raises:
            ConfigurationError: If an own entry uses neither version expression
        """
        artifact_ids: dict[str, bool] = {}
        for dep in self.managed:
            if dep.group_id != self.own_group:
                continue
            if dep.version == self.product_version_expression:
                artifact_ids[dep.artifact_id] = True
            elif dep.version == self.community_version_expression:
                artifact_ids[dep.artifact_id] = False
            else:
                raise ConfigurationError(
                    f"Unexpected version of an artifact with groupId '{self.own_group}': {dep.version}; "
                    f"expected {self.product_version_expression} or {self.community_version_expression}"
                )
        return {
            artifact_id: productized
            for artifact_id, productized in sorted(artifact_ids.items())
            if artifact_id.endswith("-deployment") or f"{artifact_id}-deployment" not in artifact_ids
        }

    def _requests(self, artifact_ids: Mapping[str, bool]) -> list[ResolutionRequest]:
        return [
            ResolutionRequest(
                Gavtc(
                    self.own_group,
                    artifact_id,
                    self.product_version if productized else self.community_version,
                    "pom",
                ),
                productized,
            )
            for artifact_id, productized in artifact_ids.items()
        ]

    def _add_extension_dependencies(self, all_gas: set[Ga], productized_gas: set[Ga]) -> None:
        for dep in self._bom_entries():
            for artifact_id, patterns in self.additional_extension_dependencies.items():
                if not patterns.contains(dep.group_id, dep.artifact_id, dep.version):
                    continue
                extension = Ga(self.own_group, artifact_id)
                if extension in productized_gas:
                    productized_gas.add(dep.ga)
                    all_gas.add(dep.ga)
                elif extension in all_gas:
                    all_gas.add(dep.ga)
                break

    def _check_platform_managed(self, all_gas: set[Ga], productized_gas: set[Ga]) -> None:
        if not self.platform_group:
            return
        managed_gas = {dep.ga for dep in self._bom_entries()}
        unmanaged = sorted(ga for ga in all_gas if ga.group_id == self.platform_group and ga not in managed_gas)
        if not unmanaged:
            return
        product_expression, community_expression = self.platform_version_expressions
        snippets = "".join(
            "\n    <dependency>"
            f"\n        <groupId>{ga.group_id}</groupId>"
            f"\n        <artifactId>{ga.artifact_id}</artifactId>"
            f"\n        <version>{product_expression if ga in productized_gas else community_expression}</version>"
            "\n    </dependency>"
            for ga in unmanaged
        )
        raise ConsistencyViolationError(
            f"Found non-managed {self.platform_group} artifacts; consider adding the following to the BOM:{snippets}"
        )

    def platform_version_updates(self, productized_gas: set[Ga]) -> dict[Ga, str]:
        """Version expressions the platform entries of the BOM should have.

        A platform entry pulled by a productized extension gets the product
        expression, any other the community one. Only entries whose
        expression differs are returned.
        """
        if not self.platform_group:
            return {}
        product_expression, community_expression = self.platform_version_expressions
        updates = {}
        for dep in sorted(self._bom_entries(), key=lambda d: d.ga):
            if dep.group_id != self.platform_group:
                continue
            expected = product_expression if dep.ga in productized_gas else community_expression
            if dep.version != expected:
                updates[dep.ga] = expected
        return updates

    @staticmethod
    def update_platform_versions(result: TransitiveDependenciesResult, editor: PomEditor) -> bool:
        """Set the versions of platform entries in the BOM's pom.xml.

        Returns:
            True if the pom.xml was written.
        """
        for ga, expression in result.platform_updates.items():
            editor.set_version(ga, expression)
        return editor.save()

    def _classify_leftovers(self, all_gas: set[Ga], productized_gas: set[Ga]) -> list[Ga]:
        by_version: dict[str, set[Ga]] = {}
        for dep in self._bom_entries():
            by_version.setdefault(dep.version, set()).add(dep.ga)

        unmappable = []
        for dep in self._bom_entries():
            if dep.ga in all_gas:
                continue
            same_version = by_version.get(dep.version, set())
            if productized_gas & same_version:
                productized_gas.add(dep.ga)
                logger.debug(f"   - BOM entry mappable to an otherwise productized group: {dep.ga}")
            elif all_gas & same_version:
                logger.debug(f"   - BOM entry mappable to an otherwise non-productized group: {dep.ga}")
            else:
                logger.warning(
                    f" - BOM entry not mappable to any group: {dep.ga} - is it perhaps superfluous and should be "
                    "removed from the BOM? Or does it need to be assigned to an extension via additional "
                    "extension dependencies?"
                )
                unmappable.append(dep.ga)
            all_gas.add(dep.ga)
        return unmappable

    def execute(self) -> TransitiveDependenciesResult:
        """Resolve all own extensions and classify their dependencies.

        Raises:
            ConfigurationError: If an own entry has an unexpected version
            DependencyResolutionError: If a graph cannot be collected
            ConsistencyViolationError: If platform artifacts are pulled but not managed
        """
        artifact_ids = self.collect_artifact_ids()
        logger.info(f"Resolving {len(artifact_ids)} extensions of {self.own_group}")

        collector = ClosureCollector(
            self.resolver,
            managed_constraints=self.managed_constraints,
            max_workers=self.max_workers,
            visit_callback=self.namespace_report,
        )
        closure = collector.resolve_closure(self._requests(artifact_ids), classify=True)

        all_gas = set(closure.all_gas)
        productized_gas = set(closure.product_gas or frozenset())
        platform_updates = self.platform_version_updates(productized_gas)
        for ga, expression in platform_updates.items():
            logger.info(f"Platform entry {ga} should be managed with {expression}")
        self._add_extension_dependencies(all_gas, productized_gas)

        multiversioned = find_multiversioned(closure.product_gavs or frozenset())
        if multiversioned:
            logger.warning("Found dependencies of productized artifacts with multiple versions:")
            for ga, versions in multiversioned.items():
                logger.warning(f"- {ga}: {versions}")

        self._check_platform_managed(all_gas, productized_gas)
        unmappable = self._classify_leftovers(all_gas, productized_gas)

        return TransitiveDependenciesResult(
            all_gas=all_gas,
            productized_gas=productized_gas,
            multiversioned=multiversioned,
            unmappable=unmappable,
            namespace_report=self.namespace_report.entries if self.namespace_report is not None else None,
            platform_updates=platform_updates,
        )

    @staticmethod
    def write(
        result: TransitiveDependenciesResult,
        base_dir: Path,
        all_file: str = ALL_DEPENDENCIES_FILE,
        productized_file: str = PRODUCTIZED_DEPENDENCIES_FILE,
        non_productized_file: str = NON_PRODUCTIZED_DEPENDENCIES_FILE,
        namespace_report_file: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> list[Path]:
        """Write the lists, each only when its content changed.

        Returns:
            Paths that were written.
        """
        outputs = [
            (base_dir / all_file, serialize_ga_list(result.all_gas)),
            (base_dir / productized_file, serialize_ga_list(result.productized_gas)),
            (base_dir / non_productized_file, serialize_ga_list(result.non_productized_gas)),
        ]
        if namespace_report_file and result.namespace_report is not None:
            outputs.append((base_dir / namespace_report_file, "\n\n".join(result.namespace_report)))
        return [path for path, content in outputs if write_if_changed(path, content, encoding)]
