"""Tests for the flag dependency graph."""

from flagcheck.flags.graph import DependencyGraph


def test_topological_sort_puts_dependencies_first():
    graph = DependencyGraph.from_dependencies(
        {
            "C": ["B"],
            "B": ["A"],
            "A": [],
        }
    )

    assert graph.topological_sort() == ["A", "B", "C"]


def test_topological_sort_is_stable():
    graph = DependencyGraph.from_dependencies({"Z": [], "Y": [], "X": ["Z"]})

    assert graph.topological_sort() == ["Z", "Y", "X"]


def test_dependencies_become_nodes():
    graph = DependencyGraph.from_dependencies({"OnStackReplacePercentage": ["CompileThreshold"]})

    assert graph.nodes == ["OnStackReplacePercentage", "CompileThreshold"]
    assert graph.get_dependencies("OnStackReplacePercentage") == {"CompileThreshold"}
    assert graph.get_dependents("CompileThreshold") == {"OnStackReplacePercentage"}
    assert graph.get_dependents("Unrelated") == set()


def test_transitive_dependents():
    graph = DependencyGraph.from_dependencies(
        {
            "CodeCacheSegmentSize": ["CodeEntryAlignment", "OptoLoopAlignment"],
            "OptoLoopAlignment": ["CodeEntryAlignment"],
            "InteriorEntryAlignment": ["CodeEntryAlignment"],
            "CodeEntryAlignment": [],
        }
    )

    assert graph.transitive_dependents("CodeEntryAlignment") == {
        "CodeCacheSegmentSize",
        "OptoLoopAlignment",
        "InteriorEntryAlignment",
    }
    assert graph.transitive_dependents("CodeCacheSegmentSize") == set()


def test_find_cycles():
    graph = DependencyGraph.from_dependencies({"A": ["B"], "B": ["A"], "C": ["C"], "D": ["A"]})

    cycles = graph.find_cycles()

    assert sorted(cycles) == [["A", "B"], ["C"]]
    # Cyclic nodes never become ready.
    assert graph.topological_sort() == []


def test_acyclic_graph_has_no_cycles():
    graph = DependencyGraph.from_dependencies({"A": ["B"], "B": []})

    assert graph.find_cycles() == []
