"""
Unit tests for dependency extraction and the Dependencies model.
"""
from derrick.MODELS.container import Container
from derrick.MODELS.dependencies import Dependencies, DependencyKind
from derrick.MODELS.run_parameters import RunParameters
from derrick.RUNNERS.dependency_extractor import DependencyExtractor


def test_extract_all_kinds():
    run = RunParameters(net="container:n", link=["a:b", "b:d"], volumes_from=["c"])
    assert DependencyExtractor.extract(run) == Dependencies(
        all=["a", "b", "c", "n"],
        link=["a", "b"],
        volumes_from=["c"],
        net="n",
    )


def test_extract_nothing():
    assert DependencyExtractor.extract(RunParameters()) == Dependencies()


def test_multiple_link_aliases_collapse():
    deps = DependencyExtractor.extract(RunParameters(link=["a:b", "a:c"]))
    assert deps.all == ["a"]
    assert deps.link == ["a"]


def test_same_name_across_kinds_is_listed_once():
    deps = DependencyExtractor.extract(
        RunParameters(link=["a:x"], volumes_from=["a", "b"], net="container:b")
    )
    assert deps.all == ["a", "b"]
    assert deps.link == ["a"]
    assert deps.volumes_from == ["a", "b"]
    assert deps.net == "b"


def test_link_without_alias():
    assert DependencyExtractor.extract(RunParameters(link=["db"])).link == ["db"]


def test_non_container_net_modes_are_not_dependencies():
    for mode in ["bridge", "host", "none", ""]:
        deps = DependencyExtractor.extract(RunParameters(net=mode))
        assert deps.net == ""
        assert deps.all == []


def test_container_dependencies_returns_fresh_copy():
    container = Container(name="a", run=RunParameters(link=["b:b"]))
    first = container.dependencies()
    first.remove("b")
    assert container.dependencies().all == ["b"]


class TestDependencies:
    """Tests for the Dependencies helpers."""

    def setup_method(self):
        self.deps = Dependencies(all=["l", "v", "n"], link=["l"], volumes_from=["v"], net="n")

    def test_must_run(self):
        assert self.deps.must_run("l")
        assert self.deps.must_run("n")
        assert not self.deps.must_run("v")
        assert not self.deps.must_run("unknown")

    def test_must_run_without_net(self):
        assert not Dependencies().must_run("")

    def test_satisfied(self):
        assert not self.deps.satisfied()
        assert Dependencies().satisfied()

    def test_remove(self):
        self.deps.remove("v")
        assert self.deps.all == ["l", "n"]
        # Only the unresolved list shrinks
        assert self.deps.volumes_from == ["v"]
        self.deps.remove("l")
        self.deps.remove("n")
        assert self.deps.satisfied()

    def test_for_kind(self):
        assert self.deps.for_kind(DependencyKind.ALL) == ["l", "v", "n"]
        assert self.deps.for_kind(DependencyKind.LINK) == ["l"]
        assert self.deps.for_kind(DependencyKind.VOLUMES_FROM) == ["v"]
        assert self.deps.for_kind(DependencyKind.NET) == ["n"]
        assert self.deps.for_kind(DependencyKind.NONE) == []
        assert self.deps.for_kind("volumesFrom") == ["v"]
        assert Dependencies().for_kind(DependencyKind.NET) == []

    def test_includes(self):
        assert self.deps.includes("v")
        assert self.deps.includes_as_kind("v", DependencyKind.VOLUMES_FROM)
        assert not self.deps.includes_as_kind("v", DependencyKind.LINK)
        assert not self.deps.includes("x")
