"""Maven coordinate value types.

All coordinates are immutable and totally ordered by their fields in
declaration order (groupId, then artifactId, then version, ...), so they
can be used as dict keys, set members and sorted deterministically.
"""

from dataclasses import dataclass

DEFAULT_TYPE = "jar"


def _split(raw: str, expected: int, kind: str) -> list[str]:
    parts = raw.strip().split(":")
    if len(parts) != expected or not all(parts):
        raise ValueError(f"Expected {kind} in the form {':'.join(['x'] * expected)}; found '{raw}'")
    return parts


@dataclass(frozen=True, order=True)
class Ga:
    """A groupId:artifactId pair."""

    group_id: str
    artifact_id: str

    @classmethod
    def of(cls, raw: str) -> "Ga":
        """Parse a ``groupId:artifactId`` string."""
        group_id, artifact_id = _split(raw, 2, "groupId:artifactId")
        return cls(group_id, artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


@dataclass(frozen=True, order=True)
class Gav:
    """A groupId:artifactId:version triple."""

    group_id: str
    artifact_id: str
    version: str

    @classmethod
    def of(cls, raw: str) -> "Gav":
        """Parse a ``groupId:artifactId:version`` string."""
        group_id, artifact_id, version = _split(raw, 3, "groupId:artifactId:version")
        return cls(group_id, artifact_id, version)

    def to_ga(self) -> Ga:
        return Ga(self.group_id, self.artifact_id)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True, order=True)
class Gavtc:
    """A fully qualified artifact: coordinates plus type and classifier.

    Used for resolution entry points, where two entries differing only in
    type or classifier are distinct artifacts.
    """

    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_TYPE
    classifier: str = ""

    def to_ga(self) -> Ga:
        return Ga(self.group_id, self.artifact_id)

    def to_gav(self) -> Gav:
        return Gav(self.group_id, self.artifact_id, self.version)

    def __str__(self) -> str:
        result = f"{self.group_id}:{self.artifact_id}:{self.version}"
        if self.type != DEFAULT_TYPE or self.classifier:
            result += f":{self.type}"
        if self.classifier:
            result += f":{self.classifier}"
        return result
