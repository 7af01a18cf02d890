"""Tests for the static adjacency map resolver."""

import pytest

from flatten_bom._resolution.resolvers.static_graph import StaticGraphResolver
from flatten_bom.coordinates import Ga, Gav, Gavtc
from flatten_bom.exceptions import ResolverError

from .graph_helpers import managed

EVIL_GRAPH = {"a:x:1": ["a:y:1"], "a:y:1": ["evil:lib:1", "a:z:1"], "a:z:1": ["evil:other:1"]}


def _flatten(node, depth=0):
    yield depth, str(node.artifact)
    for child in node.children:
        yield from _flatten(child, depth + 1)


class TestCollectGraph:
    def test_explicit_versions(self):
        resolver = StaticGraphResolver({"a:x:1": ["a:y:1"], "a:y:1": ["a:z:2"]})
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [])
        assert list(_flatten(node)) == [(0, "a:x:1"), (1, "a:y:1"), (2, "a:z:2")]

    def test_managed_version_overrides_transitive(self):
        resolver = StaticGraphResolver({"a:x": ["a:y:1"], "a:y": ["a:z"]})
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [managed("a:y:5"), managed("a:z:7")])
        assert list(_flatten(node)) == [(0, "a:x:1"), (1, "a:y:5"), (2, "a:z:7")]

    def test_versionless_child_without_constraint(self):
        resolver = StaticGraphResolver({"a:x:1": ["a:y"]})
        with pytest.raises(ResolverError, match="No version for a:y required by a:x:1"):
            resolver.collect_graph(Gavtc("a", "x", "1"), [])

    def test_managed_exclusions_prune_subtree(self):
        resolver = StaticGraphResolver(EVIL_GRAPH)
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [managed("a:y:1", exclusions=(Ga("evil", "lib"),))])
        assert [gav for _, gav in _flatten(node)] == ["a:x:1", "a:y:1", "a:z:1", "evil:other:1"]

    def test_wildcard_exclusion(self):
        resolver = StaticGraphResolver(EVIL_GRAPH)
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [managed("a:x:1", exclusions=(Ga("evil", "*"),))])
        assert [gav for _, gav in _flatten(node)] == ["a:x:1", "a:y:1", "a:z:1"]

    def test_cycles_are_cut(self):
        resolver = StaticGraphResolver({"a:x:1": ["a:y:1"], "a:y:1": ["a:x:1", "a:z:1"]})
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [])
        assert [gav for _, gav in _flatten(node)] == ["a:x:1", "a:y:1", "a:z:1"]

    def test_unknown_artifacts_are_leaves(self):
        node = StaticGraphResolver({}).collect_graph(Gavtc("a", "x", "1"), [])
        assert node.children == ()

    def test_strict_mode(self):
        with pytest.raises(ResolverError, match="not found"):
            StaticGraphResolver({}, strict=True).collect_graph(Gavtc("a", "x", "1"), [])

    def test_direct_dependencies_under_placeholder_root(self):
        resolver = StaticGraphResolver({"a:x:1": ["a:y:1"], "b:w:1": []})
        root = Gavtc("org.acme", "acme-parent", "1", "pom")
        node = resolver.collect_graph(root, [], direct_dependencies=[Gavtc("a", "x", "1"), Gavtc("b", "w", "1")])
        assert list(_flatten(node)) == [(0, "org.acme:acme-parent:1"), (1, "a:x:1"), (2, "a:y:1"), (1, "b:w:1")]

    def test_invalid_reference(self):
        with pytest.raises(ResolverError, match="Invalid artifact reference"):
            StaticGraphResolver({"a:x:1": ["broken"]}).collect_graph(Gavtc("a", "x", "1"), [])


class TestResolveArtifactFile:
    def test_relative_to_base_dir(self, tmp_path):
        jar = tmp_path / "repo" / "x-1.jar"
        jar.parent.mkdir()
        jar.write_bytes(b"")
        resolver = StaticGraphResolver({}, files={"a:x:1": "repo/x-1.jar"}, base_dir=tmp_path)
        assert resolver.resolve_artifact_file(Gav("a", "x", "1")) == jar

    def test_unknown(self, tmp_path):
        with pytest.raises(ResolverError, match="No file known"):
            StaticGraphResolver({}, base_dir=tmp_path).resolve_artifact_file(Gav("a", "x", "1"))

    def test_missing_on_disk(self, tmp_path):
        resolver = StaticGraphResolver({}, files={"a:x:1": "gone.jar"}, base_dir=tmp_path)
        with pytest.raises(ResolverError, match="does not exist"):
            resolver.resolve_artifact_file(Gav("a", "x", "1"))


def _layered_diamond(depth):
    """Every node of a layer depends on both nodes of the next layer."""
    graph = {"a:root:1": ["a:l0-left:1", "a:l0-right:1"]}
    for layer in range(depth - 1):
        below = [f"a:l{layer + 1}-left:1", f"a:l{layer + 1}-right:1"]
        graph[f"a:l{layer}-left:1"] = below
        graph[f"a:l{layer}-right:1"] = below
    return graph


class TestSharedNodes:
    def test_diamond_children_are_shared(self):
        resolver = StaticGraphResolver({"a:x:1": ["a:l:1", "a:r:1"], "a:l:1": ["a:z:1"], "a:r:1": ["a:z:1"]})
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [])
        left, right = node.children
        assert left.children[0] is right.children[0]

    def test_deep_diamond_is_built_once_per_artifact(self):
        resolver = StaticGraphResolver(_layered_diamond(30))
        node = resolver.collect_graph(Gavtc("a", "root", "1"), [])
        for _ in range(29):
            left, right = node.children
            assert left.children[0] is right.children[0]
            assert left.children[1] is right.children[1]
            node = left

    def test_different_exclusions_are_not_shared(self):
        graph = {"a:x:1": ["a:l:1", "a:r:1"], "a:l:1": ["a:z:1"], "a:r:1": ["a:z:1"], "a:z:1": ["evil:lib:1"]}
        resolver = StaticGraphResolver(graph)
        node = resolver.collect_graph(Gavtc("a", "x", "1"), [managed("a:l:1", exclusions=(Ga("evil", "lib"),))])
        left, right = node.children
        assert [str(c.artifact) for c in left.children[0].children] == []
        assert [str(c.artifact) for c in right.children[0].children] == ["evil:lib:1"]
