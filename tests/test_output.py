"""Tests for serialization and idempotent output of generated files."""

import xml.etree.ElementTree as ET
from unittest.mock import patch

import pytest

from flatten_bom import output as output_module
from flatten_bom._bom.models import Provenance
from flatten_bom.coordinates import Ga, Gav
from flatten_bom.exceptions import ConfigurationError, FileProcessingError
from flatten_bom.output import InstallFlavor, read_text_or_empty, write_if_changed
from flatten_bom.serialization import (
    POM_NS,
    location_comment,
    parse_ga_list,
    reformat,
    serialize_ga_list,
    serialize_pom,
)
from flatten_bom.workspace import ProjectInfo

from .graph_helpers import managed

PROJECT = ProjectInfo("org.acme", "acme-bom", "1.0", name="Acme BOM", parent=Gav("org.acme", "acme-parent", "1.0"))
NS = {"m": POM_NS}


@pytest.fixture
def entries():
    return [
        managed("org.lib:lib-a:2.0", source="org.lib:lib-bom:2.0"),
        managed("org.acme:acme-core:${project.version}", source="org.acme:acme-bom:1.0"),
        managed(
            "org.lib:lib-b:3.0",
            type="test-jar",
            classifier="tests",
            exclusions=(Ga("org.evil", "*"),),
        ),
    ]


class TestLocationComment:
    def test_own_project_version_is_kept_symbolic(self):
        comment = location_comment(Provenance("org.acme:acme-parent:1.0"), "org.acme", "1.0")
        assert comment == "#} org.acme:acme-parent:${project.version} "

    def test_third_party_source_kept_verbatim(self):
        comment = location_comment(Provenance("org.lib:lib-bom:1.0"), "org.acme", "1.0")
        assert comment == "#} org.lib:lib-bom:1.0 "

    def test_no_provenance(self):
        assert location_comment(None, "org.acme", "1.0") is None


class TestSerializePom:
    def test_plain_pom_structure(self, entries):
        text = serialize_pom(PROJECT, entries)
        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
        assert "<!--" not in text

        root = ET.fromstring(text)
        assert root.find("m:artifactId", NS).text == "acme-bom"
        assert root.find("m:packaging", NS).text == "pom"
        dependencies = root.findall("m:dependencyManagement/m:dependencies/m:dependency", NS)
        assert [d.find("m:artifactId", NS).text for d in dependencies] == ["lib-a", "acme-core", "lib-b"]
        assert dependencies[0].find("m:type", NS) is None
        assert dependencies[2].find("m:type", NS).text == "test-jar"
        assert dependencies[2].find("m:classifier", NS).text == "tests"
        exclusion = dependencies[2].find("m:exclusions/m:exclusion", NS)
        assert exclusion.find("m:groupId", NS).text == "org.evil"
        assert exclusion.find("m:artifactId", NS).text == "*"

    def test_verbose_comment_follows_artifact_id_on_the_same_line(self, entries):
        text = serialize_pom(PROJECT, entries, verbose=True)
        assert "<artifactId>lib-a</artifactId><!-- org.lib:lib-bom:2.0 -->" in text
        assert "<artifactId>acme-core</artifactId><!-- org.acme:acme-bom:${project.version} -->" in text
        assert "<artifactId>lib-b</artifactId>\n" in text

    def test_serialization_is_deterministic_and_canonical(self, entries):
        verbose = serialize_pom(PROJECT, entries, verbose=True)
        assert serialize_pom(PROJECT, entries, verbose=True) == verbose
        plain = serialize_pom(PROJECT, entries)
        assert reformat(plain) == plain

    def test_reformat_rejects_malformed_xml(self):
        with pytest.raises(FileProcessingError):
            reformat("<project>")


class TestGaList:
    def test_sorted_distinct_lines(self):
        text = serialize_ga_list([Ga("b", "b"), Ga("a", "z"), Ga("a", "b"), Ga("a", "b")])
        assert text == "a:b\na:z\nb:b\n"

    def test_empty(self):
        assert serialize_ga_list([]) == ""

    def test_parse(self):
        assert parse_ga_list("a:b\n\nc:d\n") == [Ga("a", "b"), Ga("c", "d")]


class TestWriteIfChanged:
    def test_missing_file_counts_as_empty(self, tmp_path):
        path = tmp_path / "missing.txt"
        assert read_text_or_empty(path) == ""
        assert write_if_changed(path, "") is False
        assert not path.exists()

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "src" / "main" / "generated" / "list.txt"
        assert write_if_changed(path, "a:b\n") is True
        assert path.read_text() == "a:b\n"

    def test_second_write_is_skipped(self, tmp_path):
        path = tmp_path / "list.txt"
        assert write_if_changed(path, "a:b\n") is True
        mtime = path.stat().st_mtime_ns
        assert write_if_changed(path, "a:b\n") is False
        assert path.stat().st_mtime_ns == mtime

    def test_changed_content_is_written(self, tmp_path):
        path = tmp_path / "list.txt"
        path.write_text("old\n")
        assert write_if_changed(path, "new\n") is True
        assert path.read_text() == "new\n"

    def test_write_failure(self, tmp_path):
        with patch.object(output_module, "open", side_effect=PermissionError("denied"), create=True):
            with pytest.raises(FileProcessingError, match="Could not write"):
                write_if_changed(tmp_path / "list.txt", "x")


class TestInstallFlavor:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("full", InstallFlavor.FULL),
            ("REDUCED", InstallFlavor.REDUCED),
            ("reduced-verbose", InstallFlavor.REDUCED_VERBOSE),
            ("reduced_verbose", InstallFlavor.REDUCED_VERBOSE),
            (InstallFlavor.ORIGINAL, InstallFlavor.ORIGINAL),
        ],
    )
    def test_parse(self, raw, expected):
        assert InstallFlavor.of(raw) is expected

    def test_invalid(self):
        with pytest.raises(ConfigurationError, match="Invalid install flavor"):
            InstallFlavor.of("tiny")
