"""Tests for the selection of resolution entry points."""

import pytest

from flatten_bom._resolution.entry_points import collect_entry_points, default_to_resolve, find_managed_version
from flatten_bom._resolution.models import DeclaredDependency
from flatten_bom.coordinates import Gavtc
from flatten_bom.exceptions import UnresolvedVersionError
from flatten_bom.patterns import CoordinateSet

from .graph_helpers import FakeRegistry, managed


@pytest.fixture
def bom():
    return [
        managed("org.acme:acme-core:1.0"),
        managed("org.acme:acme-core-deployment:1.0"),
        managed("org.lib:lib-a:2.0"),
        managed("org.lib:lib-b:3.0"),
        managed("org.lib:lib-b:3.0", type="test-jar", classifier="tests"),
        managed("org.platform:platform-core:9.0"),
    ]


class TestFindManagedVersion:
    def test_defaults_type_to_jar(self, bom):
        assert find_managed_version(bom, "org.lib", "lib-a", None, None) == "2.0"

    def test_type_and_classifier_must_match(self, bom):
        assert find_managed_version(bom, "org.lib", "lib-b", "test-jar", "tests") == "3.0"
        assert find_managed_version(bom, "org.lib", "lib-b", "test-jar", None) is None

    def test_unknown_artifact(self, bom):
        assert find_managed_version(bom, "org.lib", "unknown", None, None) is None


class TestCollectEntryPoints:
    def test_external_entries_used_as_is(self, bom):
        registry = FakeRegistry({})
        entry_points = collect_entry_points(bom, CoordinateSet.build(includes=["org.lib:lib-a"]), registry)
        assert entry_points == [Gavtc("org.lib", "lib-a", "2.0")]

    def test_modules_expand_to_compile_and_provided_dependencies(self, bom):
        registry = FakeRegistry(
            {
                "org.acme:acme-core": [
                    DeclaredDependency("org.lib", "lib-a"),
                    DeclaredDependency("org.lib", "lib-b", scope="provided"),
                    DeclaredDependency("org.lib", "lib-b", type="test-jar", classifier="tests", scope="test"),
                    DeclaredDependency("org.lib", "lib-a", scope="runtime"),
                ]
            }
        )
        entry_points = collect_entry_points(bom, CoordinateSet.build(includes=["org.acme:acme-core"]), registry)
        assert entry_points == [Gavtc("org.lib", "lib-a", "2.0"), Gavtc("org.lib", "lib-b", "3.0")]

    def test_module_dependencies_filtered_by_to_resolve(self, bom):
        registry = FakeRegistry(
            {
                "org.acme:acme-core-deployment": [
                    DeclaredDependency("org.acme", "acme-core"),
                    DeclaredDependency("org.platform", "platform-core"),
                    DeclaredDependency("org.lib", "lib-a"),
                ]
            }
        )
        to_resolve = default_to_resolve(["org.acme", "org.platform"])
        entry_points = collect_entry_points(
            bom, CoordinateSet.build(includes=["org.acme:*-deployment"]), registry, to_resolve=to_resolve
        )
        assert entry_points == [Gavtc("org.lib", "lib-a", "2.0")]

    def test_property_expressions_are_evaluated(self, bom):
        registry = FakeRegistry(
            {"org.acme:acme-core": [DeclaredDependency("${lib.group}", "lib-${lib.name}")]},
            properties={"lib.group": "org.lib", "lib.name": "a"},
        )
        entry_points = collect_entry_points(bom, CoordinateSet.build(includes=["org.acme:acme-core"]), registry)
        assert entry_points == [Gavtc("org.lib", "lib-a", "2.0")]

    def test_missing_managed_version_fails(self, bom):
        registry = FakeRegistry({"org.acme:acme-core": [DeclaredDependency("org.lib", "unmanaged")]})
        with pytest.raises(UnresolvedVersionError, match="org.lib:unmanaged"):
            collect_entry_points(bom, CoordinateSet.build(includes=["org.acme:acme-core"]), registry)

    def test_deduplicated_in_first_seen_order(self, bom):
        registry = FakeRegistry(
            {
                "org.acme:acme-core": [DeclaredDependency("org.lib", "lib-b"), DeclaredDependency("org.lib", "lib-a")],
                "org.acme:acme-core-deployment": [DeclaredDependency("org.lib", "lib-a")],
            }
        )
        entry_point_set = CoordinateSet.build(includes=["org.acme:*", "org.lib:lib-a"])
        entry_points = collect_entry_points(bom, entry_point_set, registry)
        assert entry_points == [Gavtc("org.lib", "lib-b", "3.0"), Gavtc("org.lib", "lib-a", "2.0")]

    def test_excluded_entries_are_skipped(self, bom):
        registry = FakeRegistry({})
        entry_points = collect_entry_points(
            bom, CoordinateSet.build(includes=["org.lib:*"], excludes=["org.lib:lib-b"]), registry
        )
        assert entry_points == [Gavtc("org.lib", "lib-a", "2.0")]
