"""
Unit tests for startup and shutdown ordering.
"""
import logging

import pytest
from derrick.MODELS.container import Container
from derrick.MODELS.run_parameters import RunParameters
from derrick.RUNNERS.topological_orderer import TopologicalOrderer
from derrick.exceptions import CyclicDependencyError


def make_containers(**links):
    """Builds a container map from name -> list of linked names."""
    return {
        name: Container(name=name, run=RunParameters(link=[f"{t}:{t}" for t in targets]))
        for name, targets in links.items()
    }


def test_order_linear_chain():
    orderer = TopologicalOrderer(make_containers(b=["c"], a=["b"], c=[]))
    assert orderer.order() == ["c", "b", "a"]
    assert orderer.order(reversed=True) == ["a", "b", "c"]


def test_order_places_dependencies_first():
    containers = make_containers(web=["api", "cache"], api=["db"], cache=[], db=[], worker=["db"])
    order = TopologicalOrderer(containers).order()
    for name, container in containers.items():
        for dependency in container.dependencies().all:
            assert order.index(dependency) < order.index(name)


@pytest.mark.parametrize("links", [
    {"a": [], "b": [], "c": []},
    {"a": ["b"], "b": ["c"], "c": []},
    {"a": ["b", "c"], "b": ["d"], "c": ["e"], "d": [], "e": []},
    {"web": ["api", "cache"], "api": ["db"], "cache": [], "db": [], "worker": ["db"]},
    {"x": ["z"], "y": [], "z": ["y"], "w": ["y", "x"]},
])
def test_reversed_order_mirrors_startup_order(links):
    orderer = TopologicalOrderer(make_containers(**links))
    assert orderer.order(reversed=True) == list(reversed(orderer.order()))


def test_order_mixed_kinds():
    containers = {
        "app": Container(name="app", run=RunParameters(volumes_from=["data"], net="container:proxy")),
        "data": Container(name="data"),
        "proxy": Container(name="proxy", run=RunParameters(net="host")),
    }
    assert TopologicalOrderer(containers).order() == ["data", "proxy", "app"]


def test_dangling_dependencies_are_ignored():
    orderer = TopologicalOrderer(make_containers(a=["b", "ghost"], b=["ghost"]))
    assert orderer.order() == ["b", "a"]
    assert orderer.order(reversed=True) == ["a", "b"]


def test_order_does_not_mutate_containers():
    containers = make_containers(a=["b"], b=[])
    TopologicalOrderer(containers).order()
    assert containers["a"].dependencies().all == ["b"]


def test_cycle_fails_startup_order():
    orderer = TopologicalOrderer(make_containers(b=["c"], a=["b"], c=["a"]))
    with pytest.raises(CyclicDependencyError) as excinfo:
        orderer.order()
    assert excinfo.value.unresolved == ["a", "b", "c"]


def test_cycle_is_released_for_shutdown_order(caplog):
    orderer = TopologicalOrderer(make_containers(b=["c"], a=["b"], c=["a"]))
    with caplog.at_level(logging.WARNING):
        # Same sequence as the acyclic chain a -> b -> c
        assert orderer.order(reversed=True) == ["a", "b", "c"]
    assert "Cyclic dependencies" in caplog.text
    assert "releasing c" in caplog.text


def test_cycle_release_keeps_acyclic_part_in_shutdown_order():
    # d depends on the a -> b -> a cycle
    orderer = TopologicalOrderer(make_containers(a=["b"], b=["a"], d=["a"]))
    order = orderer.order(reversed=True)
    assert order == ["d", "a", "b"]


def test_cycle_only_involves_its_members():
    orderer = TopologicalOrderer(make_containers(a=["b"], b=["a"], c=[], d=["c"]))
    with pytest.raises(CyclicDependencyError) as excinfo:
        orderer.order()
    assert excinfo.value.unresolved == ["a", "b"]


def test_empty():
    assert TopologicalOrderer({}).order() == []


def test_alphabetical():
    orderer = TopologicalOrderer(make_containers(b=[], c=[], a=[], e=[], d=[]))
    assert orderer.alphabetical() == ["a", "b", "c", "d", "e"]
    assert orderer.alphabetical(reversed=True) == ["e", "d", "c", "b", "a"]


def test_alphabetical_ignores_dependencies():
    orderer = TopologicalOrderer(make_containers(a=["b"], b=[]))
    assert orderer.alphabetical() == ["a", "b"]
