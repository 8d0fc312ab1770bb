"""Tests for the generic directed graph."""

import pytest

from monopack.errors import GraphError
from monopack.graph import DirectedGraph


def _graph(edges, nodes=()):
    graph = DirectedGraph()
    for node_id in nodes:
        graph.add_node(node_id, node_id.upper())
    for from_id, to_id in edges:
        for node_id in (from_id, to_id):
            if not graph.has_node(node_id):
                graph.add_node(node_id, node_id.upper())
        graph.connect(from_id, to_id)
    return graph


class TestMutation:
    def test_add_and_get_node(self):
        graph = DirectedGraph()
        graph.add_node("a", {"value": 1})
        assert graph.get_node("a").data == {"value": 1}
        assert graph.has_node("a")
        assert not graph.has_node("b")
        assert len(graph) == 1

    def test_duplicate_node_rejected(self):
        graph = _graph([], nodes=["a"])
        with pytest.raises(GraphError, match='Node with id "a" already exists'):
            graph.add_node("a", None)

    def test_unknown_node_rejected(self):
        graph = _graph([], nodes=["a"])
        with pytest.raises(GraphError, match='Node with id "b" does not exist'):
            graph.get_node("b")
        with pytest.raises(GraphError):
            graph.connect("a", "b")

    def test_duplicate_edge_rejected(self):
        graph = _graph([("a", "b")])
        with pytest.raises(GraphError, match="already exists"):
            graph.connect("a", "b")

    def test_disconnect(self):
        graph = _graph([("a", "b")])
        graph.disconnect("a", "b")
        assert not graph.has_connection("a", "b")
        with pytest.raises(GraphError, match="does not exist"):
            graph.disconnect("a", "b")

    def test_adjacency_keeps_insertion_order(self):
        graph = _graph([("a", "c"), ("a", "b"), ("a", "d")])
        assert graph.get_adjacent_ids("a") == ("c", "b", "d")


class TestTraversal:
    def test_traverse_visits_in_insertion_order(self):
        graph = _graph([("b", "a")], nodes=["c"])
        seen = []
        graph.traverse(lambda node: seen.append(node.id))
        assert seen == ["c", "b", "a"]

    def test_bfs_visits_reachable_nodes_once(self):
        graph = _graph([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("d", "a")], nodes=["x"])
        seen = []
        graph.visit_breadth_first_search("a", lambda node: seen.append(node.id))
        assert seen == ["a", "b", "c", "d"]

    def test_bfs_from_unknown_node(self):
        with pytest.raises(GraphError):
            DirectedGraph().visit_breadth_first_search("a", lambda node: None)


class TestCycles:
    def test_acyclic(self):
        graph = _graph([("a", "b"), ("b", "c"), ("a", "c")])
        assert graph.detect_cycles() == []
        assert not graph.is_cyclic()

    def test_simple_cycle(self):
        graph = _graph([("a", "b"), ("b", "a")])
        assert graph.detect_cycles() == [["a", "b"]]
        assert graph.is_cyclic()

    def test_self_loop(self):
        graph = _graph([("a", "a")])
        assert graph.detect_cycles() == [["a"]]

    def test_cycle_reported_once(self):
        graph = _graph([("a", "b"), ("b", "c"), ("c", "a")])
        cycles = graph.detect_cycles()
        assert len(cycles) == 1
        assert sorted(cycles[0]) == ["a", "b", "c"]


class TestTopologicalGenerations:
    def test_sinks_first(self):
        # a depends on b and c, b depends on c
        graph = _graph([("a", "b"), ("a", "c"), ("b", "c")], nodes=["d"])
        assert graph.get_topological_generations() == [["d", "c"], ["b"], ["a"]]

    def test_independent_nodes_share_a_generation(self):
        graph = _graph([], nodes=["a", "b", "c"])
        assert graph.get_topological_generations() == [["a", "b", "c"]]

    def test_empty_graph(self):
        assert DirectedGraph().get_topological_generations() == []

    def test_cyclic_graph_rejected(self):
        graph = _graph([("a", "b"), ("b", "a")])
        with pytest.raises(GraphError, match="cyclic"):
            graph.get_topological_generations()
