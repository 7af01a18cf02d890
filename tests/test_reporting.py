"""Tests for the legacy namespace migration report."""

import zipfile

import pytest

from flatten_bom._resolution.collector import ClosureCollector
from flatten_bom._resolution.models import ResolutionRequest
from flatten_bom._resolution.reporting import NamespaceMigrationReport
from flatten_bom._resolution.resolvers.static_graph import StaticGraphResolver
from flatten_bom.coordinates import Gavtc
from flatten_bom.exceptions import DependencyResolutionError, FileProcessingError

GRAPHS = {
    "org.acme:acme-ext:1": ["org.lib:legacy:1", "org.lib:clean:1", "io.quarkus:quarkus-core:1"],
    "org.lib:clean:1": ["org.acme:acme-util:1"],
    "org.acme:acme-util:1": ["org.lib:legacy-deep:1"],
    "io.quarkus:quarkus-core:1": ["org.lib:upstream-legacy:1"],
}
SINGLE = {"org.acme:a:1": ["org.lib:x:1"]}


def _jar(path, *names):
    with zipfile.ZipFile(path, "w") as jar:
        for name in names:
            jar.writestr(name, "")
    return path.name


@pytest.fixture
def resolver(tmp_path):
    files = {
        "org.lib:legacy:1": _jar(tmp_path / "legacy-1.jar", "javax/inject/Inject.class"),
        "org.lib:clean:1": _jar(tmp_path / "clean-1.jar", "jakarta/inject/Inject.class"),
        "org.lib:legacy-deep:1": _jar(tmp_path / "legacy-deep-1.jar", "META-INF/MANIFEST.MF", "javax/el/Expr.class"),
        "org.lib:upstream-legacy:1": _jar(tmp_path / "upstream-legacy-1.jar", "javax/x/X.class"),
    }
    return StaticGraphResolver(GRAPHS, files=files, base_dir=tmp_path)


class TestNamespaceMigrationReport:
    def test_paths_to_legacy_jars(self, resolver):
        report = NamespaceMigrationReport(resolver, "org.acme", upstream_groups=["io.quarkus"])
        report.consume([resolver.collect_graph(Gavtc("org.acme", "acme-ext", "1", "pom"), [])])

        assert report.entries == [
            "org.acme:acme-ext:1\n    -> org.lib:legacy:1",
            "org.acme:acme-util:1\n    -> org.lib:legacy-deep:1",
        ]
        assert report.render() == "\n\n".join(report.entries)

    def test_custom_prefix(self, resolver):
        report = NamespaceMigrationReport(resolver, "org.acme", upstream_groups=["io.quarkus"], prefix="jakarta/")
        report.consume([resolver.collect_graph(Gavtc("org.acme", "acme-ext", "1"), [])])
        assert report.entries == ["org.acme:acme-ext:1\n    -> org.lib:clean:1"]

    def test_as_visit_callback_only_for_productized_requests(self, resolver):
        report = NamespaceMigrationReport(resolver, "org.acme", upstream_groups=["io.quarkus"])
        collector = ClosureCollector(resolver, visit_callback=report)

        collector.resolve_closure([ResolutionRequest(Gavtc("org.acme", "acme-ext", "1"), productized=False)])
        assert report.entries == []

        collector.resolve_closure([ResolutionRequest(Gavtc("org.acme", "acme-ext", "1"), productized=True)])
        assert len(report.entries) == 2

    def test_unresolvable_artifact(self, tmp_path):
        resolver = StaticGraphResolver({"org.acme:a:1": ["org.lib:x:1"]}, base_dir=tmp_path)
        report = NamespaceMigrationReport(resolver, "org.acme")
        with pytest.raises(DependencyResolutionError, match="org.lib:x:1"):
            report.consume([resolver.collect_graph(Gavtc("org.acme", "a", "1"), [])])

    def test_corrupt_jar(self, tmp_path):
        (tmp_path / "x-1.jar").write_bytes(b"not a zip")
        resolver = StaticGraphResolver(SINGLE, files={"org.lib:x:1": "x-1.jar"}, base_dir=tmp_path)
        report = NamespaceMigrationReport(resolver, "org.acme")
        with pytest.raises(FileProcessingError, match="Could not read"):
            report.consume([resolver.collect_graph(Gavtc("org.acme", "a", "1"), [])])

    def test_non_jar_files_are_ignored(self, tmp_path):
        (tmp_path / "x-1.pom").write_text("<project/>")
        resolver = StaticGraphResolver(SINGLE, files={"org.lib:x:1": "x-1.pom"}, base_dir=tmp_path)
        report = NamespaceMigrationReport(resolver, "org.acme")
        report.consume([resolver.collect_graph(Gavtc("org.acme", "a", "1"), [])])
        assert report.entries == []
