"""In-place editing and inspection of a BOM's pom.xml.

Edits are spliced into the original text: everything outside the edited
elements stays as it was, byte for byte. New elements take their
indentation from their siblings.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional
from xml.parsers import expat
from xml.sax.saxutils import escape

from .coordinates import Ga
from .exceptions import FileProcessingError
from .logging_config import logger
from .output import write_if_changed
from .serialization import INDENT

_START_TAG = re.compile(rb"""<[^\s/>]+(?:\s+[^\s=/>]+\s*=\s*(?:"[^"]*"|'[^']*'))*\s*(/?)>""")
_TRAILING_WHITESPACE = re.compile(rb"\s*\Z")


@dataclass
class _Element:
    """An element of the document with the byte offsets of its parts."""

    qname: str
    start: int
    content_start: int
    empty_tag: bool = False
    content_end: int = -1
    end: int = -1
    children: list["_Element"] = field(default_factory=list)
    text_parts: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.qname.rsplit(":", 1)[-1]

    @property
    def prefix(self) -> str:
        return self.qname[: len(self.qname) - len(self.name)]

    @property
    def text(self) -> str:
        return "".join(self.text_parts).strip()

    def child(self, name: str) -> Optional["_Element"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def child_text(self, name: str) -> str:
        child = self.child(name)
        return child.text if child is not None else ""

    def iter(self) -> Iterator["_Element"]:
        yield self
        for child in self.children:
            yield from child.iter()


def _index(raw: bytes, path: Path) -> _Element:
    parser = expat.ParserCreate(encoding="utf-8")
    stack: list[_Element] = []
    roots: list[_Element] = []

    def start(name, attributes):
        offset = parser.CurrentByteIndex
        match = _START_TAG.match(raw, offset)
        element = _Element(name, offset, match.end(), empty_tag=bool(match.group(1)))
        if element.empty_tag:
            element.content_start = element.content_end = element.end = match.end()
        (stack[-1].children if stack else roots).append(element)
        stack.append(element)

    def end(name):
        element = stack.pop()
        if not element.empty_tag:
            offset = parser.CurrentByteIndex
            element.content_end = offset
            element.end = raw.index(b">", offset) + 1

    def text(data):
        if stack:
            stack[-1].text_parts.append(data)

    parser.StartElementHandler = start
    parser.EndElementHandler = end
    parser.CharacterDataHandler = text
    try:
        parser.Parse(raw, True)
    except expat.ExpatError as e:
        raise FileProcessingError(f"Could not parse {path}: {e}") from e
    return roots[0]


def _read(path: Path, encoding: str) -> bytes:
    try:
        return path.read_text(encoding=encoding).encode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileProcessingError(f"Could not read {path}: {e}") from e


def read_banned_patterns(pom_path: Path, encoding: str = "utf-8") -> list[str]:
    """Read the ``bannedDependencies/excludes/exclude`` patterns of a pom.xml.

    Returns:
        Patterns in document order; empty when the file does not exist.
    """
    pom_path = Path(pom_path)
    if not pom_path.exists():
        return []
    root = _index(_read(pom_path, encoding), pom_path)
    patterns = []
    for element in root.iter():
        if element.name != "bannedDependencies":
            continue
        excludes = element.child("excludes")
        if excludes is None:
            continue
        patterns.extend(e.text for e in excludes.children if e.name == "exclude" and e.text)
    logger.debug(f"Read {len(patterns)} banned patterns from {pom_path}")
    return patterns


class XmlPomEditor:
    """Edits the managed dependencies of a pom.xml in place.

    Args:
        path: The pom.xml to edit
        encoding: Encoding of the file
    """

    def __init__(self, path: Path, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._encoding = encoding
        self._raw = _read(self._path, encoding)
        self._root = _index(self._raw, self._path)
        self._changed = False

    @property
    def changed(self) -> bool:
        return self._changed

    def _splice(self, start: int, end: int, replacement: str) -> None:
        self._raw = self._raw[:start] + replacement.encode("utf-8") + self._raw[end:]
        self._root = _index(self._raw, self._path)
        self._changed = True

    def _whitespace(self, start: int, end: int) -> str:
        return _TRAILING_WHITESPACE.search(self._raw, start, end).group().decode("utf-8")

    def _before(self, parent: _Element, index: int) -> str:
        """Whitespace preceding the child at ``index``."""
        start = parent.content_start if index == 0 else parent.children[index - 1].end
        return self._whitespace(start, parent.children[index].start)

    def _closing(self, parent: _Element) -> str:
        """Whitespace preceding the end tag of a parent with children."""
        return self._whitespace(parent.children[-1].end, parent.content_end)

    def _step(self, parent: _Element) -> str:
        inner = self._before(parent, 0)
        outer = self._closing(parent)
        if len(inner) > len(outer) and inner.startswith(outer):
            return inner[len(outer) :]
        return INDENT

    def _managed_dependencies(self) -> list[_Element]:
        management = self._root.child("dependencyManagement")
        dependencies = management.child("dependencies") if management is not None else None
        if dependencies is None:
            return []
        return [d for d in dependencies.children if d.name == "dependency"]

    def _matching(self, entry: Ga) -> list[int]:
        return [
            index
            for index, dependency in enumerate(self._managed_dependencies())
            if Ga(dependency.child_text("groupId"), dependency.child_text("artifactId")) == entry
        ]

    @staticmethod
    def _exclusion_markup(exclusion: Ga, prefix: str, indent: str, step: str) -> str:
        inner = indent + step
        return (
            f"<{prefix}exclusion>"
            f"{inner}<{prefix}groupId>{escape(exclusion.group_id)}</{prefix}groupId>"
            f"{inner}<{prefix}artifactId>{escape(exclusion.artifact_id)}</{prefix}artifactId>"
            f"{indent}</{prefix}exclusion>"
        )

    def _add_to(self, dependency: _Element, exclusion: Ga) -> bool:
        prefix = dependency.prefix
        step = self._step(dependency)
        exclusions = dependency.child("exclusions")

        if exclusions is None:
            indent = self._before(dependency, len(dependency.children) - 1)
            inner = indent + step
            markup = (
                f"{indent}<{prefix}exclusions>{inner}{self._exclusion_markup(exclusion, prefix, inner, step)}"
                f"{indent}</{prefix}exclusions>"
            )
            end = dependency.children[-1].end
            self._splice(end, end, markup)
            return True

        position = len(exclusions.children)
        for index, existing in enumerate(exclusions.children):
            if existing.name != "exclusion":
                continue
            existing_ga = Ga(existing.child_text("groupId"), existing.child_text("artifactId"))
            if existing_ga == exclusion:
                return False
            if position == len(exclusions.children) and exclusion < existing_ga:
                position = index

        if not exclusions.children:
            outer = self._before(dependency, dependency.children.index(exclusions))
            inner = outer + step
            content = f"{inner}{self._exclusion_markup(exclusion, prefix, inner, step)}{outer}"
            if exclusions.empty_tag:
                self._splice(exclusions.start, exclusions.end, f"<{exclusions.qname}>{content}</{exclusions.qname}>")
            else:
                self._splice(exclusions.content_start, exclusions.content_end, content)
        elif position < len(exclusions.children):
            sibling = self._before(exclusions, position)
            offset = exclusions.children[position].start
            self._splice(offset, offset, self._exclusion_markup(exclusion, prefix, sibling, step) + sibling)
        else:
            sibling = self._before(exclusions, position - 1)
            offset = exclusions.children[-1].end
            self._splice(offset, offset, sibling + self._exclusion_markup(exclusion, prefix, sibling, step))
        return True

    def add_exclusion(self, entry: Ga, exclusion: Ga) -> bool:
        changed = False
        for index in self._matching(entry):
            if self._add_to(self._managed_dependencies()[index], exclusion):
                logger.info(f"Added exclusion {exclusion} to {entry} in {self._path}")
                changed = True
        return changed

    def set_version(self, entry: Ga, version: str) -> bool:
        changed = False
        for index in self._matching(entry):
            element = self._managed_dependencies()[index].child("version")
            if element is None or element.text == version:
                continue
            if element.empty_tag:
                self._splice(element.start, element.end, f"<{element.qname}>{escape(version)}</{element.qname}>")
            else:
                self._splice(element.content_start, element.content_end, escape(version))
            logger.info(f"Set version of {entry} to {version} in {self._path}")
            changed = True
        return changed

    def to_string(self) -> str:
        return self._raw.decode("utf-8")

    def save(self) -> bool:
        if not self._changed:
            return False
        written = write_if_changed(self._path, self.to_string(), self._encoding)
        self._changed = False
        return written
