"""BOM flattening pipeline.

The pipeline turns a BOM into three generated files:

1. Apply entry transformations to the managed entries
2. Select the resolution entry points
3. Resolve their transitive closure
4. Reduce the BOM to the entries the closure requires
5. Write the full, reduced-verbose and reduced flattened BOMs
6. Run the consistency checks
7. Select the flavor to install

Files are written before the checks run, so a failing run still leaves
its output in place for inspection.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ._bom.models import BomEntryTransformation, ManagedDependency
from ._bom.reduction import ReductionResult, origin_exclude_set, reduce_bom
from ._bom.transform import merge_transformations, transform_all
from ._checks import CheckContext, Finding, OnFailure, check
from ._resolution.collector import ClosureCollector
from ._resolution.entry_points import collect_entry_points, default_to_resolve
from ._resolution.models import Closure
from ._resolution.protocol import ArtifactResolver, ModuleRegistry, PomEditor
from .console import AuditTrail, get_audit_trail
from .coordinates import Gavtc
from .logging_config import logger
from .output import InstallFlavor, write_if_changed
from .patterns import CoordinateSet, GavPattern
from .serialization import serialize_pom
from .workspace import Workspace

DEFAULT_FULL_POM_FILE = "src/main/generated/flattened-full-pom.xml"
DEFAULT_REDUCED_POM_FILE = "src/main/generated/flattened-reduced-pom.xml"
DEFAULT_REDUCED_VERBOSE_POM_FILE = "src/main/generated/flattened-reduced-verbose-pom.xml"


@dataclass
class FlattenResult:
    """
    Result of a flattening run.

    Attributes:
        install_path: The flattened BOM selected for installation
        written: Generated files whose content changed
        entry_points: Resolution entry points, None when run quickly
        closure: Merged closure, None when run quickly
        reduction: Full and reduced entries, None when run quickly
        findings: Consistency findings not escalated by the policy
    """

    install_path: Path
    written: list[Path] = field(default_factory=list)
    entry_points: Optional[list[Gavtc]] = None
    closure: Optional[Closure] = None
    reduction: Optional[ReductionResult] = None
    findings: list[Finding] = field(default_factory=list)


class FlattenBomTask:
    """Flattens the BOM of a workspace.

    Args:
        workspace: The loaded workspace descriptor
        resolver: Artifact resolver building dependency graphs
        registry: Module registry, by default the workspace's own
        base_dir: Directory output paths are relative to
        root_dir: Root of the source tree, searched for the list of
            non-productized dependencies
        full_pom_file: Output path of the full flattened BOM
        reduced_pom_file: Output path of the reduced flattened BOM
        reduced_verbose_pom_file: Output path of the annotated reduced BOM
        entry_point_includes: Patterns of BOM entries to resolve
        entry_point_excludes: Patterns of BOM entries not to resolve
        origin_excludes: Patterns of declaring BOMs whose entries are dropped
        suspects: Patterns reported when pulled by an entry point
        transformations: Rules applied to the managed entries
        platform_groups: groupIds assumed resolved along with the own group
        own_groups: groupIds of the project's own artifacts
        diff_groups: Third-party groupIds that must be managed exactly
        banned_patterns: Dependencies banned transitively, by default the
            workspace's own
        on_failure: Policy applied to consistency findings
        auto_fix: Add missing exclusions through ``pom_editor``
        pom_editor: Editor of the source BOM
        install_flavor: Which flattened BOM to install
        quickly: Skip all computation and only select the file to install
        max_workers: Number of graphs resolved concurrently
        active_profiles: Profiles active when reading module dependencies
        encoding: Encoding of generated files
        audit: Audit trail receiving the BOM modifications
    """

    def __init__(
        self,
        workspace: Workspace,
        resolver: ArtifactResolver,
        registry: Optional[ModuleRegistry] = None,
        base_dir: Optional[Path] = None,
        root_dir: Optional[Path] = None,
        full_pom_file: str = DEFAULT_FULL_POM_FILE,
        reduced_pom_file: str = DEFAULT_REDUCED_POM_FILE,
        reduced_verbose_pom_file: str = DEFAULT_REDUCED_VERBOSE_POM_FILE,
        entry_point_includes: Sequence[str] = (),
        entry_point_excludes: Sequence[str] = (),
        origin_excludes: Sequence[str] = (),
        suspects: Sequence[str] = (),
        transformations: Sequence[BomEntryTransformation] = (),
        platform_groups: Sequence[str] = (),
        own_groups: Optional[Sequence[str]] = None,
        diff_groups: Sequence[str] = (),
        banned_patterns: Optional[Sequence[str]] = None,
        on_failure: OnFailure | str = OnFailure.FAIL,
        auto_fix: bool = False,
        pom_editor: Optional[PomEditor] = None,
        install_flavor: InstallFlavor | str = InstallFlavor.REDUCED,
        quickly: bool = False,
        max_workers: int = 1,
        active_profiles: Sequence[str] = (),
        encoding: str = "utf-8",
        audit: Optional[AuditTrail] = None,
    ) -> None:
        self.workspace = workspace
        self.resolver = resolver
        self.registry = registry or workspace.module_registry()
        self.base_dir = base_dir or workspace.base_dir
        self.root_dir = root_dir or self.base_dir
        self.full_pom_path = self.base_dir / full_pom_file
        self.reduced_pom_path = self.base_dir / reduced_pom_file
        self.reduced_verbose_pom_path = self.base_dir / reduced_verbose_pom_file
        self.entry_point_set = CoordinateSet.build(list(entry_point_includes), list(entry_point_excludes))
        self.origin_excludes = list(origin_excludes)
        self.suspects = list(suspects)
        self.transformations = list(transformations)
        self.own_groups = frozenset(own_groups or [workspace.project.group_id])
        self.platform_groups = list(platform_groups)
        self.diff_groups = list(diff_groups)
        raw_banned = workspace.banned_patterns if banned_patterns is None else banned_patterns
        self.banned_patterns = [GavPattern.of(p) for p in raw_banned]
        self.on_failure = OnFailure.of(on_failure)
        self.auto_fix = auto_fix
        self.pom_editor = pom_editor
        self.install_flavor = InstallFlavor.of(install_flavor)
        self.quickly = quickly
        self.max_workers = max_workers
        self.active_profiles = list(active_profiles)
        self.encoding = encoding
        self.audit = audit or get_audit_trail()

    def install_path(self) -> Path:
        return {
            InstallFlavor.FULL: self.full_pom_path,
            InstallFlavor.REDUCED: self.reduced_pom_path,
            InstallFlavor.REDUCED_VERBOSE: self.reduced_verbose_pom_path,
            InstallFlavor.ORIGINAL: self.workspace.path,
        }[self.install_flavor]

    def transform(self) -> list[ManagedDependency]:
        """Apply the configured and the product-suffix transformations."""
        transformations = merge_transformations(self.root_dir, self.transformations, self.encoding)
        full = transform_all(self.workspace.bom, transformations)
        for original, transformed in zip(self.workspace.bom, full):
            if original.version != transformed.version:
                self.audit.record_version_rewrite(str(original.ga), original.version, transformed.version)
            for exclusion in transformed.exclusions[len(original.exclusions) :]:
                self.audit.record_exclusion_added(str(original.ga), str(exclusion))
        return full

    def _placeholder_root(self) -> tuple[Gavtc, CoordinateSet]:
        """The artifact entry points are resolved under, and its exclusion.

        The BOM's parent is assumed to be installed already and to have no
        dependencies of its own.
        """
        project = self.workspace.project
        placeholder = project.parent or project.gav
        root = Gavtc(placeholder.group_id, placeholder.artifact_id, placeholder.version, "pom")
        return root, CoordinateSet.build(includes=[f"{placeholder.group_id}:{placeholder.artifact_id}"])

    def resolve(self, full: Sequence[ManagedDependency]) -> tuple[list[Gavtc], Closure]:
        module_gas = set(self.registry.modules_by_ga())
        to_resolve = default_to_resolve(self.own_groups | set(self.platform_groups))
        entry_points = collect_entry_points(
            full, self.entry_point_set, self.registry, self.active_profiles, to_resolve=to_resolve
        )

        logger.debug("Constraints")
        constraints = [dep for dep in full if dep.ga not in module_gas]
        for dep in constraints:
            logger.debug(f" - {dep} {[str(e) for e in dep.exclusions]}")

        root, excludes = self._placeholder_root()
        collector = ClosureCollector(
            self.resolver,
            managed_constraints=constraints,
            excludes=excludes,
            root=root,
            suspects=self.suspects,
            max_workers=self.max_workers,
        )
        return entry_points, collector.resolve_closure(entry_points)

    def reduce(self, full: Sequence[ManagedDependency], closure: Closure) -> ReductionResult:
        module_gas = frozenset(self.registry.modules_by_ga())
        reduction = reduce_bom(full, closure.all_gas, module_gas, origin_exclude_set(self.origin_excludes))
        for dep in reduction.dropped_by_origin:
            self.audit.record_dropped(str(dep), f"declared in {dep.provenance}")
        for dep in reduction.dropped_as_unused:
            self.audit.record_dropped(str(dep), "not required")
        return reduction

    def write(self, reduction: ReductionResult) -> list[Path]:
        """Write the three flattened BOMs, each only if its content changed."""
        project = self.workspace.project
        outputs = [
            (self.full_pom_path, serialize_pom(project, reduction.full, True, self.encoding)),
            (self.reduced_verbose_pom_path, serialize_pom(project, reduction.reduced, True, self.encoding)),
            (self.reduced_pom_path, serialize_pom(project, reduction.reduced, False, self.encoding)),
        ]
        written = []
        for path, content in outputs:
            if write_if_changed(path, content, self.encoding):
                self.audit.record_file_written(str(path))
                written.append(path)
        return written

    def check(self, full: Sequence[ManagedDependency], closure: Closure) -> list[Finding]:
        context = CheckContext(
            managed=full,
            module_gas=frozenset(self.registry.modules_by_ga()),
            own_groups=self.own_groups,
            project_version=self.workspace.project.version,
            closure=closure,
            bom_name=self.workspace.project.artifact_id,
            diff_groups=self.diff_groups,
            banned_patterns=self.banned_patterns,
            pom_editor=self.pom_editor,
            auto_fix=self.auto_fix,
        )
        try:
            return check(context, self.on_failure)
        finally:
            for entry_point, exclusions in context.fixed.items():
                for exclusion in exclusions:
                    self.audit.record_fix(str(entry_point.to_ga()), str(exclusion))

    def execute(self) -> FlattenResult:
        """Run the pipeline.

        Raises:
            FlattenBomError: Any failure; under the FAIL policy this includes
                consistency findings, raised after the files were written
        """
        if self.quickly:
            logger.info(f"Skipping BOM flattening; installing {self.install_path()}")
            return FlattenResult(install_path=self.install_path())

        full = self.transform()
        entry_points, closure = self.resolve(full)
        reduction = self.reduce(full, closure)
        written = self.write(reduction)
        findings = self.check(full, closure)
        return FlattenResult(
            install_path=self.install_path(),
            written=written,
            entry_points=entry_points,
            closure=closure,
            reduction=reduction,
            findings=findings,
        )
