"""
Serialization of flattened BOMs and artifact lists.

A flattened BOM is written as a minimal ``pom.xml`` carrying the project's
coordinates and a ``<dependencyManagement>`` section. The verbose flavor
annotates each entry with a ``<!-- source -->`` comment naming the BOM or
module the entry was declared in.

All output goes through :func:`reformat`, so that the same model always
produces byte-identical text.
"""

import re
import xml.etree.ElementTree as ET
from typing import Iterable, Optional, Sequence

from ._bom.models import ManagedDependency, Provenance
from .coordinates import DEFAULT_TYPE, Ga
from .exceptions import FileProcessingError
from .workspace import ProjectInfo

POM_NS = "http://maven.apache.org/POM/4.0.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = f"{POM_NS} http://maven.apache.org/xsd/maven-4.0.0.xsd"
MODEL_VERSION = "4.0.0"
INDENT = "    "

# Marks comments that belong at the end of the preceding line
LOCATION_MARKER = "#}"
_LOCATION_COMMENT = re.compile(r"\s*<!--" + re.escape(LOCATION_MARKER))

ET.register_namespace("", POM_NS)
ET.register_namespace("xsi", XSI_NS)


def _tag(name: str) -> str:
    return f"{{{POM_NS}}}{name}"


def _text_element(parent: ET.Element, name: str, text: Optional[str]) -> Optional[ET.Element]:
    if not text:
        return None
    element = ET.SubElement(parent, _tag(name))
    element.text = text
    return element


def location_comment(provenance: Optional[Provenance], own_group: str, project_version: str) -> Optional[str]:
    """Render the source annotation of a managed entry.

    The project version of the project's own artifacts is written as
    ``${project.version}`` so that the annotation does not change on release.
    """
    if provenance is None or not provenance.model_id:
        return None
    source = provenance.model_id
    if source.startswith(own_group + ":"):
        source = source.replace(":" + project_version, ":${project.version}")
    return f"{LOCATION_MARKER} {source} "


def _dependency_element(
    parent: ET.Element,
    dep: ManagedDependency,
    comment: Optional[str],
) -> None:
    element = ET.SubElement(parent, _tag("dependency"))
    _text_element(element, "groupId", dep.group_id)
    _text_element(element, "artifactId", dep.artifact_id)
    if comment:
        element.append(ET.Comment(comment))
    _text_element(element, "version", dep.version)
    if dep.type and dep.type != DEFAULT_TYPE:
        _text_element(element, "type", dep.type)
    _text_element(element, "classifier", dep.classifier)
    _text_element(element, "scope", dep.scope)
    if dep.exclusions:
        exclusions = ET.SubElement(element, _tag("exclusions"))
        for exclusion in dep.exclusions:
            exclusion_element = ET.SubElement(exclusions, _tag("exclusion"))
            _text_element(exclusion_element, "groupId", exclusion.group_id)
            _text_element(exclusion_element, "artifactId", exclusion.artifact_id)


def build_pom(project: ProjectInfo, dependencies: Sequence[ManagedDependency], verbose: bool) -> ET.Element:
    """Build the element tree of a flattened BOM."""
    root = ET.Element(_tag("project"), {f"{{{XSI_NS}}}schemaLocation": SCHEMA_LOCATION})
    _text_element(root, "modelVersion", MODEL_VERSION)
    _text_element(root, "groupId", project.group_id)
    _text_element(root, "artifactId", project.artifact_id)
    _text_element(root, "version", project.version)
    _text_element(root, "packaging", "pom")
    _text_element(root, "name", project.name)
    _text_element(root, "description", project.description)

    management = ET.SubElement(root, _tag("dependencyManagement"))
    container = ET.SubElement(management, _tag("dependencies"))
    for dep in dependencies:
        comment = location_comment(dep.provenance, project.group_id, project.version) if verbose else None
        _dependency_element(container, dep, comment)
    return root


def reformat(xml: str, encoding: str = "utf-8") -> str:
    """Pretty print an XML document in a canonical way.

    Comments are preserved; location comments are moved to the end of the
    line they annotate.

    Raises:
        FileProcessingError: If the document cannot be parsed
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        root = ET.fromstring(xml, parser=parser)
    except ET.ParseError as e:
        raise FileProcessingError(f"Could not reformat XML: {e}") from e
    ET.indent(root, space=INDENT)
    body = ET.tostring(root, encoding="unicode")
    body = _LOCATION_COMMENT.sub("<!--", body)
    return f'<?xml version="1.0" encoding="{encoding.upper()}"?>\n{body}\n'


def serialize_pom(
    project: ProjectInfo,
    dependencies: Sequence[ManagedDependency],
    verbose: bool = False,
    encoding: str = "utf-8",
) -> str:
    """Serialize a flattened BOM.

    Args:
        project: Coordinates and metadata of the BOM
        dependencies: Managed entries in output order
        verbose: Annotate each entry with its source
        encoding: Encoding named in the XML declaration

    Returns:
        The canonical text of the flattened pom.xml.
    """
    return reformat(ET.tostring(build_pom(project, dependencies, verbose), encoding="unicode"), encoding)


def serialize_ga_list(gas: Iterable[Ga]) -> str:
    """One sorted ``groupId:artifactId`` per line."""
    return "".join(f"{ga}\n" for ga in sorted(set(gas)))


def parse_ga_list(text: str) -> list[Ga]:
    """Parse the output of :func:`serialize_ga_list`, skipping blank lines."""
    return [Ga.of(line) for line in text.splitlines() if line.strip()]
