"""Command line interface for flatten-bom."""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import click

from .. import __version__
from .._bom.models import BomEntryTransformation
from .._checks import OnFailure
from .._resolution.reporting import DEFAULT_PREFIX, NamespaceMigrationReport
from ..console import (
    AuditTrail,
    print_banner,
    print_final_failure,
    print_final_success,
    print_findings_table,
    print_step_end,
    print_step_header,
    print_summary_table,
    reset_audit_trail,
)
from ..exceptions import ConfigurationError, FileProcessingError, FlattenBomError
from ..flatten import (
    DEFAULT_FULL_POM_FILE,
    DEFAULT_REDUCED_POM_FILE,
    DEFAULT_REDUCED_VERBOSE_POM_FILE,
    FlattenBomTask,
    FlattenResult,
)
from ..logging_config import logger, set_log_level
from ..output import InstallFlavor
from ..pom_editor import XmlPomEditor, read_banned_patterns
from ..transitive import (
    ALL_DEPENDENCIES_FILE,
    NON_PRODUCTIZED_DEPENDENCIES_FILE,
    PRODUCTIZED_DEPENDENCIES_FILE,
    TransitiveDependencies,
    TransitiveDependenciesResult,
    parse_additional_dependencies,
)
from ..workspace import Workspace, load_workspace

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

ON_FAILURE_CHOICES = [p.value for p in OnFailure]
INSTALL_FLAVOR_CHOICES = [f.value for f in InstallFlavor]


def split_values(values: Optional[Iterable[str]]) -> list[str]:
    """Flatten repeated options whose values may also be comma separated."""
    result = []
    for value in values or ():
        result.extend(v.strip() for v in value.split(",") if v.strip())
    return result


def parse_transformation(raw: str) -> BomEntryTransformation:
    """Parse a transformation given as ``pattern|versionReplacement|exclusions``.

    The version replacement and the exclusions may be left empty, e.g.
    ``org.acme:*||org.legacy:legacy-api``.

    Raises:
        ConfigurationError: If the value is malformed
    """
    parts = raw.split("|")
    if len(parts) > 3 or not parts[0].strip():
        raise ConfigurationError(
            f"Invalid transformation '{raw}'. Expected format: 'pattern|versionReplacement|exclusions'"
        )
    pattern = parts[0].strip()
    replacement = parts[1].strip() if len(parts) > 1 and parts[1].strip() else None
    exclusions = parts[2].strip() if len(parts) > 2 and parts[2].strip() else None
    return BomEntryTransformation.of(pattern, replacement, exclusions)


def _resolve_base_dir(workspace: str, base_dir: Optional[str]) -> Path:
    return Path(base_dir) if base_dir else Path(workspace).parent


@dataclass
class Config:
    """Configuration of a ``flatten`` run."""

    workspace: str
    base_dir: Optional[str] = None
    root_dir: Optional[str] = None
    pom_file: Optional[str] = None
    full_pom_file: str = DEFAULT_FULL_POM_FILE
    reduced_pom_file: str = DEFAULT_REDUCED_POM_FILE
    reduced_verbose_pom_file: str = DEFAULT_REDUCED_VERBOSE_POM_FILE
    entry_point_includes: list[str] = field(default_factory=list)
    entry_point_excludes: list[str] = field(default_factory=list)
    origin_excludes: list[str] = field(default_factory=list)
    suspects: list[str] = field(default_factory=list)
    transformations: list[str] = field(default_factory=list)
    platform_groups: list[str] = field(default_factory=list)
    own_groups: list[str] = field(default_factory=list)
    diff_groups: list[str] = field(default_factory=list)
    on_failure: str = OnFailure.FAIL.value
    format: bool = False
    install_flavor: str = InstallFlavor.REDUCED.value
    quickly: bool = False
    max_workers: int = 1
    active_profiles: list[str] = field(default_factory=list)
    encoding: str = "utf-8"
    audit_file: Optional[str] = None
    parsed_transformations: list[BomEntryTransformation] = field(default_factory=list, repr=False)

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.workspace:
            raise ConfigurationError("Workspace descriptor is not defined")
        if not Path(self.workspace).is_file():
            raise ConfigurationError(f"Workspace descriptor not found: {self.workspace}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max-workers must be at least 1, got {self.max_workers}")

        self.on_failure = OnFailure.of(self.on_failure).value
        self.install_flavor = InstallFlavor.of(self.install_flavor).value
        self.parsed_transformations = [parse_transformation(t) for t in self.transformations]

        if self.format and not self.pom_path.is_file():
            raise ConfigurationError(f"--format needs the BOM's pom.xml to add exclusions to: {self.pom_path}")

    @property
    def resolved_base_dir(self) -> Path:
        return _resolve_base_dir(self.workspace, self.base_dir)

    @property
    def pom_path(self) -> Path:
        """The BOM's pom.xml: source of banned patterns and target of fixes."""
        if self.pom_file:
            return Path(self.pom_file)
        return self.resolved_base_dir / "pom.xml"


@dataclass
class TransitiveConfig:
    """Configuration of a ``transitive`` run."""

    workspace: str
    base_dir: Optional[str] = None
    own_group: Optional[str] = None
    product_version: Optional[str] = None
    community_version: Optional[str] = None
    product_version_expression: str = "${project.version}"
    community_version_expression: str = "${community.version}"
    platform_group: Optional[str] = None
    platform_version_expression: str = "${platform.version}"
    platform_community_version_expression: str = "${platform-community.version}"
    pom_file: Optional[str] = None
    additional_extension_dependencies: list[str] = field(default_factory=list)
    upstream_groups: list[str] = field(default_factory=list)
    namespace_report_file: Optional[str] = None
    namespace_prefix: str = DEFAULT_PREFIX
    all_file: str = ALL_DEPENDENCIES_FILE
    productized_file: str = PRODUCTIZED_DEPENDENCIES_FILE
    non_productized_file: str = NON_PRODUCTIZED_DEPENDENCIES_FILE
    max_workers: int = 1
    encoding: str = "utf-8"

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.workspace or not Path(self.workspace).is_file():
            raise ConfigurationError(f"Workspace descriptor not found: {self.workspace}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max-workers must be at least 1, got {self.max_workers}")
        for raw in self.additional_extension_dependencies:
            artifact_id, sep, patterns = raw.partition("=")
            if not sep or not artifact_id.strip() or not patterns.strip():
                raise ConfigurationError(
                    f"Invalid additional extension dependency '{raw}'. Expected format: 'artifactId=pattern[,pattern]'"
                )

    @property
    def resolved_base_dir(self) -> Path:
        return _resolve_base_dir(self.workspace, self.base_dir)

    @property
    def pom_path(self) -> Path:
        """The BOM's pom.xml whose platform entry versions are updated."""
        if self.pom_file:
            return Path(self.pom_file)
        return self.resolved_base_dir / "pom.xml"

    def additional_dependencies_mapping(self) -> dict[str, str]:
        mapping = {}
        for raw in self.additional_extension_dependencies:
            artifact_id, _, patterns = raw.partition("=")
            mapping[artifact_id.strip()] = patterns.strip()
        return mapping


def build_config(**kwargs) -> Config:
    """
    Build and validate a flatten configuration.

    Args:
        **kwargs: Config fields; list fields may hold comma separated values

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    for name in (
        "entry_point_includes",
        "entry_point_excludes",
        "origin_excludes",
        "suspects",
        "platform_groups",
        "own_groups",
        "diff_groups",
        "active_profiles",
    ):
        if name in kwargs:
            kwargs[name] = split_values(kwargs[name])
    if "transformations" in kwargs:
        kwargs["transformations"] = list(kwargs["transformations"] or [])
    config = Config(**kwargs)
    config.validate()
    return config


def build_transitive_config(**kwargs) -> TransitiveConfig:
    """Build and validate a transitive dependencies configuration."""
    if "upstream_groups" in kwargs:
        kwargs["upstream_groups"] = split_values(kwargs["upstream_groups"])
    if "additional_extension_dependencies" in kwargs:
        kwargs["additional_extension_dependencies"] = list(kwargs["additional_extension_dependencies"] or [])
    config = TransitiveConfig(**kwargs)
    config.validate()
    return config


def _load(path: str, encoding: str) -> Workspace:
    print_step_header(1, "Loading Workspace")
    try:
        workspace = load_workspace(path, encoding)
    except FlattenBomError:
        print_step_end(1, success=False)
        raise
    logger.info(f"Loaded {workspace.project.gav} with {len(workspace.bom)} managed entries")
    print_step_end(1)
    return workspace


def _write_audit_file(audit: AuditTrail, config: Config, failing: bool = False) -> None:
    if not config.audit_file:
        return
    try:
        audit.write_audit_file(config.audit_file, config.encoding)
    except FileProcessingError as e:
        if not failing:
            raise
        # the error of the run itself is reported instead
        logger.error(str(e))


def run_pipeline(config: Config) -> FlattenResult:
    """Flatten the BOM described by the configuration.

    Raises:
        FlattenBomError: If any step fails
    """
    audit = reset_audit_trail()
    workspace = _load(config.workspace, config.encoding)

    banned_patterns = list(workspace.banned_patterns)
    pom_patterns = read_banned_patterns(config.pom_path, config.encoding)
    banned_patterns.extend(p for p in pom_patterns if p not in banned_patterns)
    pom_editor = XmlPomEditor(config.pom_path, config.encoding) if config.format else None

    task = FlattenBomTask(
        workspace,
        resolver=workspace.resolver(),
        base_dir=config.resolved_base_dir,
        root_dir=Path(config.root_dir) if config.root_dir else None,
        full_pom_file=config.full_pom_file,
        reduced_pom_file=config.reduced_pom_file,
        reduced_verbose_pom_file=config.reduced_verbose_pom_file,
        entry_point_includes=config.entry_point_includes,
        entry_point_excludes=config.entry_point_excludes,
        origin_excludes=config.origin_excludes,
        suspects=config.suspects,
        transformations=config.parsed_transformations,
        platform_groups=config.platform_groups,
        own_groups=config.own_groups or None,
        diff_groups=config.diff_groups,
        banned_patterns=banned_patterns,
        on_failure=config.on_failure,
        auto_fix=config.format,
        pom_editor=pom_editor,
        install_flavor=config.install_flavor,
        quickly=config.quickly,
        max_workers=config.max_workers,
        active_profiles=config.active_profiles,
        encoding=config.encoding,
        audit=audit,
    )

    print_step_header(2, "Flattening BOM")
    try:
        result = task.execute()
    except FlattenBomError:
        print_step_end(2, success=False)
        _write_audit_file(audit, config, failing=True)
        raise
    _write_audit_file(audit, config)
    print_step_end(2)

    if result.reduction is not None:
        print_summary_table(
            "Flattened BOM",
            [
                ("Entry points", len(result.entry_points or [])),
                ("Transitive artifacts", len(result.closure.all_gas) if result.closure else 0),
                ("Full entries", len(result.reduction.full)),
                ("Reduced entries", len(result.reduction.reduced)),
                ("Files written", len(result.written)),
            ],
            show_if_empty=True,
        )
        print_findings_table(result.findings, config.on_failure)
        audit.print_summary()
    return result


def run_transitive(config: TransitiveConfig) -> TransitiveDependenciesResult:
    """Write the transitive dependency lists of the workspace's extensions.

    Raises:
        FlattenBomError: If any step fails
    """
    workspace = _load(config.workspace, config.encoding)
    resolver = workspace.resolver()
    own_group = config.own_group or workspace.project.group_id
    community_version = config.community_version or workspace.properties.get("community.version")
    if not community_version:
        raise ConfigurationError("Community version is not defined; set --community-version or community.version")

    namespace_report = None
    if config.namespace_report_file:
        namespace_report = NamespaceMigrationReport(
            resolver, own_group, config.upstream_groups, prefix=config.namespace_prefix
        )

    task = TransitiveDependencies(
        resolver,
        workspace.bom,
        own_group=own_group,
        product_version=config.product_version or workspace.project.version,
        community_version=community_version,
        product_version_expression=config.product_version_expression,
        community_version_expression=config.community_version_expression,
        additional_extension_dependencies=parse_additional_dependencies(config.additional_dependencies_mapping()),
        platform_group=config.platform_group,
        platform_version_expressions=(
            config.platform_version_expression,
            config.platform_community_version_expression,
        ),
        evaluate=workspace.module_registry().expression_evaluator([]),
        namespace_report=namespace_report,
        max_workers=config.max_workers,
    )

    print_step_header(2, "Resolving Extensions")
    try:
        result = task.execute()
        if result.platform_updates:
            if config.pom_path.is_file():
                editor = XmlPomEditor(config.pom_path, config.encoding)
                TransitiveDependencies.update_platform_versions(result, editor)
            else:
                logger.warning(
                    f"{config.pom_path} not found; {len(result.platform_updates)} platform entries were not updated"
                )
        written = TransitiveDependencies.write(
            result,
            config.resolved_base_dir,
            all_file=config.all_file,
            productized_file=config.productized_file,
            non_productized_file=config.non_productized_file,
            namespace_report_file=config.namespace_report_file,
            encoding=config.encoding,
        )
    except FlattenBomError:
        print_step_end(2, success=False)
        raise
    print_step_end(2)

    print_summary_table(
        "Transitive dependencies",
        [
            ("All", len(result.all_gas)),
            ("Productized", len(result.productized_gas)),
            ("Non-productized", len(result.non_productized_gas)),
            ("Multiversioned", len(result.multiversioned)),
            ("Unmappable", len(result.unmappable)),
            ("Platform entries updated", len(result.platform_updates)),
            ("Files written", len(written)),
        ],
        show_if_empty=True,
    )
    return result


def _fail(message: str) -> None:
    logger.error(message)
    print_final_failure(message)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(__version__, "--version", prog_name="flatten-bom")
@click.option("--verbose", "-v", is_flag=True, envvar="FLATTEN_BOM_VERBOSE", help="Enable debug logging.")
@click.option("--quiet", "-q", is_flag=True, envvar="FLATTEN_BOM_QUIET", help="Only log warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """Reduce a Maven BOM to the artifacts a project actually requires."""
    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet")
    if verbose:
        set_log_level("DEBUG")
    elif quiet:
        set_log_level("WARNING")

    print_banner(__version__)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


_workspace_argument = click.argument(
    "workspace", envvar="FLATTEN_BOM_WORKSPACE", type=click.Path(dir_okay=False), default="flatten-bom.yaml"
)
_base_dir_option = click.option(
    "--base-dir",
    envvar="FLATTEN_BOM_BASE_DIR",
    type=click.Path(file_okay=False),
    help="Directory output paths are relative to (default: the workspace's directory).",
)
_max_workers_option = click.option(
    "--max-workers",
    "-j",
    envvar="FLATTEN_BOM_MAX_WORKERS",
    type=int,
    default=1,
    show_default=True,
    help="Number of dependency graphs resolved concurrently.",
)
_encoding_option = click.option(
    "--encoding", envvar="FLATTEN_BOM_ENCODING", default="utf-8", show_default=True, help="Encoding of files."
)


@cli.command(context_settings=CONTEXT_SETTINGS)
@_workspace_argument
@_base_dir_option
@click.option(
    "--root-dir",
    envvar="FLATTEN_BOM_ROOT_DIR",
    type=click.Path(file_okay=False),
    help="Source tree root holding the non-productized dependency list.",
)
@click.option("--pom-file", envvar="FLATTEN_BOM_POM_FILE", help="The BOM's pom.xml (default: <base-dir>/pom.xml).")
@click.option("--full-pom-file", envvar="FLATTEN_BOM_FULL_POM_FILE", default=DEFAULT_FULL_POM_FILE, show_default=True)
@click.option(
    "--reduced-pom-file", envvar="FLATTEN_BOM_REDUCED_POM_FILE", default=DEFAULT_REDUCED_POM_FILE, show_default=True
)
@click.option(
    "--reduced-verbose-pom-file",
    envvar="FLATTEN_BOM_REDUCED_VERBOSE_POM_FILE",
    default=DEFAULT_REDUCED_VERBOSE_POM_FILE,
    show_default=True,
)
@click.option(
    "--include",
    "entry_point_includes",
    multiple=True,
    envvar="FLATTEN_BOM_INCLUDES",
    help="Pattern of BOM entries to resolve; repeatable or comma separated.",
)
@click.option(
    "--exclude",
    "entry_point_excludes",
    multiple=True,
    envvar="FLATTEN_BOM_EXCLUDES",
    help="Pattern of BOM entries not to resolve.",
)
@click.option(
    "--origin-exclude",
    "origin_excludes",
    multiple=True,
    envvar="FLATTEN_BOM_ORIGIN_EXCLUDES",
    help="Pattern of imported BOMs whose entries are dropped.",
)
@click.option(
    "--suspect", "suspects", multiple=True, envvar="FLATTEN_BOM_SUSPECTS", help="Pattern reported when pulled."
)
@click.option(
    "--transformation",
    "transformations",
    multiple=True,
    envvar="FLATTEN_BOM_TRANSFORMATIONS",
    help="Entry rewrite as 'pattern|versionReplacement|exclusions'.",
)
@click.option(
    "--platform-group",
    "platform_groups",
    multiple=True,
    envvar="FLATTEN_BOM_PLATFORM_GROUPS",
    help="groupId whose artifacts are not expanded from own modules.",
)
@click.option(
    "--own-group",
    "own_groups",
    multiple=True,
    envvar="FLATTEN_BOM_OWN_GROUPS",
    help="groupId of the project's own artifacts (default: the BOM's groupId).",
)
@click.option(
    "--diff-group",
    "diff_groups",
    multiple=True,
    envvar="FLATTEN_BOM_DIFF_GROUPS",
    help="groupId whose managed entries must match the required ones exactly.",
)
@click.option(
    "--on-failure",
    envvar="FLATTEN_BOM_ON_FAILURE",
    type=click.Choice(ON_FAILURE_CHOICES, case_sensitive=False),
    default=OnFailure.FAIL.value,
    show_default=True,
    help="What to do when consistency checks report findings.",
)
@click.option(
    "--format/--no-format",
    "format_",
    envvar="FLATTEN_BOM_FORMAT",
    default=False,
    help="Add missing exclusions of banned dependencies to the pom.xml.",
)
@click.option(
    "--install-flavor",
    envvar="FLATTEN_BOM_INSTALL_FLAVOR",
    type=click.Choice(INSTALL_FLAVOR_CHOICES, case_sensitive=False),
    default=InstallFlavor.REDUCED.value,
    show_default=True,
    help="Which flattened BOM to install.",
)
@click.option(
    "--quickly/--no-quickly",
    envvar="FLATTEN_BOM_QUICKLY",
    default=False,
    help="Skip flattening and only select the file to install.",
)
@_max_workers_option
@click.option(
    "--profile",
    "active_profiles",
    multiple=True,
    envvar="FLATTEN_BOM_PROFILES",
    help="Profile active when reading module dependencies.",
)
@_encoding_option
@click.option("--audit-file", envvar="FLATTEN_BOM_AUDIT_FILE", help="Write the audit trail of BOM modifications here.")
def flatten(
    workspace: str,
    base_dir: Optional[str],
    root_dir: Optional[str],
    pom_file: Optional[str],
    full_pom_file: str,
    reduced_pom_file: str,
    reduced_verbose_pom_file: str,
    entry_point_includes: tuple[str, ...],
    entry_point_excludes: tuple[str, ...],
    origin_excludes: tuple[str, ...],
    suspects: tuple[str, ...],
    transformations: tuple[str, ...],
    platform_groups: tuple[str, ...],
    own_groups: tuple[str, ...],
    diff_groups: tuple[str, ...],
    on_failure: str,
    format_: bool,
    install_flavor: str,
    quickly: bool,
    max_workers: int,
    active_profiles: tuple[str, ...],
    encoding: str,
    audit_file: Optional[str],
) -> None:
    """Write the full, reduced and reduced-verbose flattened BOMs of WORKSPACE."""
    try:
        config = build_config(
            workspace=workspace,
            base_dir=base_dir,
            root_dir=root_dir,
            pom_file=pom_file,
            full_pom_file=full_pom_file,
            reduced_pom_file=reduced_pom_file,
            reduced_verbose_pom_file=reduced_verbose_pom_file,
            entry_point_includes=entry_point_includes,
            entry_point_excludes=entry_point_excludes,
            origin_excludes=origin_excludes,
            suspects=suspects,
            transformations=transformations,
            platform_groups=platform_groups,
            own_groups=own_groups,
            diff_groups=diff_groups,
            on_failure=on_failure,
            format=format_,
            install_flavor=install_flavor,
            quickly=quickly,
            max_workers=max_workers,
            active_profiles=active_profiles,
            encoding=encoding,
            audit_file=audit_file,
        )
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")

    try:
        result = run_pipeline(config)
    except FlattenBomError as e:
        _fail(str(e))

    print_final_success(f"Install {result.install_path}")


@cli.command(context_settings=CONTEXT_SETTINGS)
@_workspace_argument
@_base_dir_option
@click.option("--own-group", envvar="FLATTEN_BOM_OWN_GROUP", help="groupId of the extensions (default: the BOM's).")
@click.option("--product-version", envvar="FLATTEN_BOM_PRODUCT_VERSION", help="Version of productized extensions.")
@click.option("--community-version", envvar="FLATTEN_BOM_COMMUNITY_VERSION", help="Version of community extensions.")
@click.option(
    "--product-version-expression",
    envvar="FLATTEN_BOM_PRODUCT_VERSION_EXPRESSION",
    default="${project.version}",
    show_default=True,
)
@click.option(
    "--community-version-expression",
    envvar="FLATTEN_BOM_COMMUNITY_VERSION_EXPRESSION",
    default="${community.version}",
    show_default=True,
)
@click.option(
    "--platform-group", envvar="FLATTEN_BOM_PLATFORM_GROUP", help="groupId whose transitives must all be managed."
)
@click.option(
    "--platform-version-expression",
    envvar="FLATTEN_BOM_PLATFORM_VERSION_EXPRESSION",
    default="${platform.version}",
    show_default=True,
    help="Version of platform entries pulled by productized extensions.",
)
@click.option(
    "--platform-community-version-expression",
    envvar="FLATTEN_BOM_PLATFORM_COMMUNITY_VERSION_EXPRESSION",
    default="${platform-community.version}",
    show_default=True,
    help="Version of the other platform entries.",
)
@click.option(
    "--pom-file",
    envvar="FLATTEN_BOM_POM_FILE",
    help="The BOM's pom.xml whose platform entries are updated (default: <base-dir>/pom.xml).",
)
@click.option(
    "--additional-dependency",
    "additional_extension_dependencies",
    multiple=True,
    envvar="FLATTEN_BOM_ADDITIONAL_DEPENDENCIES",
    help="Managed entries pulled by an extension as 'artifactId=pattern[,pattern]'.",
)
@click.option(
    "--upstream-group",
    "upstream_groups",
    multiple=True,
    envvar="FLATTEN_BOM_UPSTREAM_GROUPS",
    help="groupId ignored by the namespace migration report.",
)
@click.option("--namespace-report-file", envvar="FLATTEN_BOM_NAMESPACE_REPORT_FILE")
@click.option("--namespace-prefix", envvar="FLATTEN_BOM_NAMESPACE_PREFIX", default=DEFAULT_PREFIX, show_default=True)
@_max_workers_option
@_encoding_option
def transitive(
    workspace: str,
    base_dir: Optional[str],
    own_group: Optional[str],
    product_version: Optional[str],
    community_version: Optional[str],
    product_version_expression: str,
    community_version_expression: str,
    platform_group: Optional[str],
    platform_version_expression: str,
    platform_community_version_expression: str,
    pom_file: Optional[str],
    additional_extension_dependencies: tuple[str, ...],
    upstream_groups: tuple[str, ...],
    namespace_report_file: Optional[str],
    namespace_prefix: str,
    max_workers: int,
    encoding: str,
) -> None:
    """Write the productized and non-productized transitive dependency lists of WORKSPACE."""
    try:
        config = build_transitive_config(
            workspace=workspace,
            base_dir=base_dir,
            own_group=own_group,
            product_version=product_version,
            community_version=community_version,
            product_version_expression=product_version_expression,
            community_version_expression=community_version_expression,
            platform_group=platform_group,
            platform_version_expression=platform_version_expression,
            platform_community_version_expression=platform_community_version_expression,
            pom_file=pom_file,
            additional_extension_dependencies=additional_extension_dependencies,
            upstream_groups=upstream_groups,
            namespace_report_file=namespace_report_file,
            namespace_prefix=namespace_prefix,
            max_workers=max_workers,
            encoding=encoding,
        )
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}")

    try:
        run_transitive(config)
    except FlattenBomError as e:
        _fail(str(e))

    print_final_success("Transitive dependency lists are up to date")


def main() -> None:
    """Entry point of the ``flatten-bom`` script."""
    cli(obj={})

