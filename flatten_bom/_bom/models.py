"""Data models for BOM entries and their transformations."""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Pattern

from ..coordinates import DEFAULT_TYPE, Ga, Gav, Gavtc
from ..exceptions import ConfigurationError
from ..patterns import GavPattern

_JAVA_GROUP_REF = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class Provenance:
    """Where a managed entry was declared.

    Attributes:
        model_id: ``groupId:artifactId:version`` of the declaring module or
            imported BOM; may be any free-form source description when the
            declaring model has no coordinates
    """

    model_id: str

    def gav(self) -> Optional[Gav]:
        """Parse the model id as coordinates, or None when it is not a GAV."""
        try:
            return Gav.of(self.model_id)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.model_id


@dataclass(frozen=True)
class ManagedDependency:
    """A single ``<dependencyManagement>`` entry of a BOM.

    Attributes:
        group_id: Maven groupId
        artifact_id: Maven artifactId
        version: Version string, possibly a property expression
        type: Artifact type (default: jar)
        classifier: Classifier, empty when absent
        scope: Scope, empty when absent (``import`` for imported BOMs)
        exclusions: Exclusions declared on the entry
        provenance: Declaring module or BOM
    """

    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_TYPE
    classifier: str = ""
    scope: str = ""
    exclusions: tuple[Ga, ...] = ()
    provenance: Optional[Provenance] = None

    @property
    def ga(self) -> Ga:
        return Ga(self.group_id, self.artifact_id)

    @property
    def gavtc(self) -> Gavtc:
        return Gavtc(self.group_id, self.artifact_id, self.version, self.type or DEFAULT_TYPE, self.classifier or "")

    def __str__(self) -> str:
        return str(self.gavtc)


def parse_exclusions(raw: str) -> tuple[Ga, ...]:
    """Parse a comma or whitespace separated list of ``groupId:artifactId``."""
    result = []
    for token in re.split(r"[,\s]+", raw.strip()):
        if not token:
            continue
        try:
            result.append(Ga.of(token))
        except ValueError as e:
            raise ConfigurationError(f"Invalid exclusion '{token}': {e}") from e
    return tuple(result)


@dataclass(frozen=True)
class BomEntryTransformation:
    """A rule rewriting the BOM entries matched by a pattern.

    A transformation may add exclusions to the matching entries and/or
    rewrite their version with a single ``regex/replacement`` substitution.

    Attributes:
        gav_pattern: Entries matching this pattern are transformed
        add_exclusions: Exclusions to append to matching entries
        version_pattern: Compiled version regex, None when versions are kept
        version_replace: Replacement string for version_pattern matches
    """

    gav_pattern: GavPattern
    add_exclusions: tuple[Ga, ...] = ()
    version_pattern: Optional[Pattern[str]] = field(default=None, compare=False)
    version_replace: str = ""

    @classmethod
    def of(
        cls,
        gav_pattern: str,
        version_replacement: Optional[str] = None,
        add_exclusions: Optional[str | Iterable[str]] = None,
    ) -> "BomEntryTransformation":
        """Build a transformation from its textual configuration.

        Args:
            gav_pattern: Pattern selecting the entries to transform
            version_replacement: ``regex/replacement`` with exactly one
                separating slash; Java style ``$1`` group references are
                accepted in the replacement
            add_exclusions: Comma separated string or iterable of
                ``groupId:artifactId`` exclusions

        Raises:
            ConfigurationError: If the version replacement is malformed
        """
        version_pattern = None
        version_replace = ""
        if version_replacement is not None:
            slash_pos = version_replacement.find("/")
            if slash_pos < 1:
                raise ConfigurationError(
                    "versionReplacement is expected to contain exactly one slash (/) "
                    f"preceded by a regular expression; found {version_replacement}"
                )
            try:
                version_pattern = re.compile(version_replacement[:slash_pos])
            except re.error as e:
                raise ConfigurationError(f"Invalid versionReplacement regex in '{version_replacement}': {e}") from e
            version_replace = _JAVA_GROUP_REF.sub(r"\\g<\1>", version_replacement[slash_pos + 1 :])

        if add_exclusions is None:
            exclusions: tuple[Ga, ...] = ()
        elif isinstance(add_exclusions, str):
            exclusions = parse_exclusions(add_exclusions)
        else:
            exclusions = parse_exclusions(",".join(add_exclusions))

        return cls(
            gav_pattern=GavPattern.of(gav_pattern),
            add_exclusions=exclusions,
            version_pattern=version_pattern,
            version_replace=version_replace,
        )

    def matches(self, dep: ManagedDependency) -> bool:
        return self.gav_pattern.matches(dep.group_id, dep.artifact_id, dep.version)

    def replace_version(self, version: str) -> str:
        if self.version_pattern is None:
            return version
        return self.version_pattern.sub(self.version_replace, version)

    def __str__(self) -> str:
        parts = [str(self.gav_pattern)]
        if self.version_pattern is not None:
            parts.append(f"{self.version_pattern.pattern}/{self.version_replace}")
        if self.add_exclusions:
            parts.append("exclusions=" + ",".join(str(e) for e in self.add_exclusions))
        return " ".join(parts)
