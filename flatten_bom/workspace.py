"""Workspace descriptor loading.

A workspace descriptor is a YAML or JSON document describing everything the
resolution engine needs from the outside world: the BOM to flatten with the
provenance of each entry, the modules of the source tree, banned
dependency patterns and, optionally, static dependency graphs.

Usage:
    from flatten_bom.workspace import load_workspace

    workspace = load_workspace("workspace.yaml")
    registry = workspace.module_registry()
    resolver = workspace.resolver()
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

import jsonschema
import yaml

from ._bom.models import ManagedDependency, Provenance
from ._resolution.models import DeclaredDependency, ModuleInfo
from ._resolution.resolvers.static_graph import StaticGraphResolver
from .coordinates import DEFAULT_TYPE, Ga, Gav
from .exceptions import ConfigurationError, FileProcessingError
from .logging_config import logger

PACKAGE_DIR = Path(__file__).parent
WORKSPACE_SCHEMA = PACKAGE_DIR / "schemas" / "workspace.schema.json"

_EXPRESSION = re.compile(r"\$\{([^}]+)\}")

# Cache for loaded schemas
_schema_cache: dict[str, dict] = {}


def _load_schema(schema_path: Path) -> dict:
    """Load a JSON schema from disk with caching."""
    cache_key = str(schema_path)
    if cache_key in _schema_cache:
        return _schema_cache[cache_key]

    with open(schema_path) as f:
        schema = json.load(f)
        _schema_cache[cache_key] = schema
        return schema


@dataclass(frozen=True)
class ProjectInfo:
    """Coordinates and metadata of the BOM project itself."""

    group_id: str
    artifact_id: str
    version: str
    name: Optional[str] = None
    description: Optional[str] = None
    parent: Optional[Gav] = None

    @property
    def gav(self) -> Gav:
        return Gav(self.group_id, self.artifact_id, self.version)


@dataclass(frozen=True)
class _ModuleEntry:
    info: ModuleInfo
    dependencies: tuple[tuple[DeclaredDependency, Optional[str]], ...] = ()


class WorkspaceModuleRegistry:
    """Module registry backed by the ``modules`` section of a workspace."""

    def __init__(
        self,
        modules: Sequence[_ModuleEntry],
        properties: Mapping[str, str],
        profiles: Mapping[str, Mapping[str, str]],
    ) -> None:
        self._modules = {m.info.ga: m for m in modules}
        self._properties = dict(properties)
        self._profiles = {k: dict(v) for k, v in profiles.items()}

    def modules_by_ga(self) -> Mapping[Ga, ModuleInfo]:
        return {ga: m.info for ga, m in self._modules.items()}

    def own_dependencies_of(self, ga: Ga, active_profiles: Sequence[str]) -> list[DeclaredDependency]:
        module = self._modules.get(ga)
        if module is None:
            raise ConfigurationError(f"{ga} is not a module of this workspace")
        return [dep for dep, profile in module.dependencies if profile is None or profile in active_profiles]

    def expression_evaluator(self, active_profiles: Sequence[str]) -> Callable[[str], str]:
        """Build a ``${property}`` evaluator; unknown properties are left as-is."""
        properties = dict(self._properties)
        for profile in active_profiles:
            properties.update(self._profiles.get(profile, {}))

        def evaluate(expression: str) -> str:
            if expression is None:
                return expression
            return _EXPRESSION.sub(lambda m: properties.get(m.group(1), m.group(0)), expression)

        return evaluate


@dataclass
class Workspace:
    """A loaded workspace descriptor.

    Attributes:
        path: File the descriptor was loaded from
        project: The BOM project
        bom: Managed dependencies in declaration order
        banned_patterns: Patterns of dependencies banned transitively
    """

    path: Path
    project: ProjectInfo
    bom: list[ManagedDependency]
    banned_patterns: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    profiles: dict[str, dict[str, str]] = field(default_factory=dict)
    modules: list[_ModuleEntry] = field(default_factory=list)
    graphs: dict[str, list[str]] = field(default_factory=dict)
    files: dict[str, str] = field(default_factory=dict)

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    def module_registry(self) -> WorkspaceModuleRegistry:
        return WorkspaceModuleRegistry(self.modules, self.properties, self.profiles)

    def resolver(self) -> StaticGraphResolver:
        """A resolver serving the static ``graphs`` of this workspace."""
        return StaticGraphResolver.from_mapping(self.graphs, files=self.files, base_dir=self.base_dir)


def _managed(raw: dict[str, Any]) -> ManagedDependency:
    try:
        exclusions = tuple(Ga.of(e) for e in raw.get("exclusions", []))
    except ValueError as e:
        raise ConfigurationError(f"Invalid exclusion in BOM entry {raw}: {e}") from e
    source = raw.get("source")
    return ManagedDependency(
        group_id=raw["groupId"],
        artifact_id=raw["artifactId"],
        version=raw["version"],
        type=raw.get("type") or DEFAULT_TYPE,
        classifier=raw.get("classifier") or "",
        scope=raw.get("scope") or "",
        exclusions=exclusions,
        provenance=Provenance(source) if source else None,
    )


def _module(raw: dict[str, Any]) -> _ModuleEntry:
    dependencies = tuple(
        (
            DeclaredDependency(
                group_id=dep["groupId"],
                artifact_id=dep["artifactId"],
                version=dep.get("version"),
                type=dep.get("type"),
                classifier=dep.get("classifier"),
                scope=dep.get("scope"),
            ),
            dep.get("profile"),
        )
        for dep in raw.get("dependencies", [])
    )
    return _ModuleEntry(ModuleInfo(Ga.of(raw["ga"]), raw.get("path")), dependencies)


def parse_workspace(data: Any, path: Path) -> Workspace:
    """Validate and convert raw descriptor data.

    Raises:
        ConfigurationError: If the data does not conform to the workspace schema
    """
    try:
        jsonschema.validate(instance=data, schema=_load_schema(WORKSPACE_SCHEMA))
    except jsonschema.ValidationError as e:
        error_path = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"Invalid workspace descriptor {path} at {error_path}: {e.message}") from e

    raw_project = data["project"]
    project = ProjectInfo(
        group_id=raw_project["groupId"],
        artifact_id=raw_project["artifactId"],
        version=raw_project["version"],
        name=raw_project.get("name"),
        description=raw_project.get("description"),
        parent=Gav.of(raw_project["parent"]) if raw_project.get("parent") else None,
    )

    profiles = {pid: dict(p.get("properties", {})) for pid, p in data.get("profiles", {}).items()}
    properties = {
        "project.groupId": project.group_id,
        "project.artifactId": project.artifact_id,
        "project.version": project.version,
        **data.get("properties", {}),
    }

    workspace = Workspace(
        path=path,
        project=project,
        bom=[_managed(raw) for raw in data["bom"]],
        banned_patterns=list(data.get("bannedDependencies", [])),
        properties=properties,
        profiles=profiles,
        modules=[_module(raw) for raw in data.get("modules", [])],
        graphs={k: list(v) for k, v in data.get("graphs", {}).items()},
        files=dict(data.get("files", {})),
    )
    logger.debug(
        f"Loaded workspace {path}: {len(workspace.bom)} BOM entries, {len(workspace.modules)} modules, "
        f"{len(workspace.graphs)} graph nodes"
    )
    return workspace


def load_workspace(path: str | Path, encoding: str = "utf-8") -> Workspace:
    """Load a workspace descriptor from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        FileProcessingError: If the file cannot be read or parsed
        ConfigurationError: If the content is not a valid descriptor
    """
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except OSError as e:
        raise FileProcessingError(f"Could not read workspace {path}: {e}") from e

    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise FileProcessingError(f"Could not parse workspace {path}: {e}") from e

    return parse_workspace(data, path)
