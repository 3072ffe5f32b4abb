"""Tests for structural and configuration validation."""

import unittest
import sys
import os

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from pipeline_editor.graph.schema import GRAPH_FIELD, Edge, Graph, Node
from pipeline_editor.graph.store import GraphStore
from pipeline_editor.graph.validation import (
    check_dangling_edges,
    check_node_configs,
    check_orphans,
    check_self_loops,
    detect_cycles,
    find_cycle_members,
    is_valid,
    validate_graph,
)


def make_graph(node_ids, edges, kind="filter"):
    """Build a graph of valid-by-default filter nodes."""
    return Graph(
        nodes=tuple(Node(id=node_id, type=kind) for node_id in node_ids),
        edges=tuple(Edge(id=f"e{i}", source=s, target=t) for i, (s, t) in enumerate(edges)),
    )


class TestOrphans(unittest.TestCase):

    def test_single_node_is_valid(self):
        """Test that a lone node is not an orphan."""
        graph = make_graph(["a"], [])
        self.assertEqual(check_orphans(graph), [])
        self.assertTrue(is_valid(graph))

    def test_two_disconnected_nodes(self):
        """Test that two unconnected nodes yield one aggregate orphan error."""
        errors = validate_graph(make_graph(["a", "b"], []))
        orphan_errors = [e for e in errors if "orphan" in e.message]
        self.assertEqual(len(orphan_errors), 1)
        self.assertEqual(orphan_errors[0].field, GRAPH_FIELD)
        self.assertIn("2", orphan_errors[0].message)
        self.assertEqual(orphan_errors[0].details, ("a", "b"))

    def test_only_isolated_nodes_reported(self):
        """Test that only nodes without any edge are listed as orphans."""
        errors = check_orphans(make_graph(["a", "b", "c"], [("a", "b")]))
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].details, ("c",))

    def test_connected_graph_has_no_orphans(self):
        """Test that a connected pair has no orphans."""
        self.assertEqual(check_orphans(make_graph(["a", "b"], [("a", "b")])), [])


class TestDanglingEdges(unittest.TestCase):

    def test_dangling_edge_reported(self):
        """Test that an edge to a missing node is reported with the missing id."""
        graph = make_graph(["a"], [("a", "ghost")])
        errors = check_dangling_edges(graph)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].edge_id, "e0")
        self.assertEqual(errors[0].details, ("ghost",))

    def test_store_graphs_have_no_dangling_edges(self):
        """Test that graphs built through the store never contain dangling edges."""
        store = GraphStore()
        a = store.add_node("filter")
        b = store.add_node("filter")
        store.connect(a.id, b.id)
        store.delete_nodes([b.id])
        self.assertEqual(check_dangling_edges(store.snapshot()), [])


class TestNodeConfigs(unittest.TestCase):

    def test_errors_namespaced_by_node(self):
        """Test that config errors carry the id of the node they belong to."""
        graph = Graph(nodes=(Node(id="src", type="data-source"), Node(id="out", type="output")),
                      edges=(Edge(id="e", source="src", target="out"),))
        errors = check_node_configs(graph)
        self.assertEqual(
            sorted((e.node_id, e.field) for e in errors),
            [("out", "destination"), ("src", "connectionString"), ("src", "tableName")],
        )


class TestCycles(unittest.TestCase):

    def test_two_node_cycle(self):
        """Test that a two-node loop yields one error naming both nodes."""
        store = GraphStore()
        a = store.add_node("filter")
        b = store.add_node("filter")
        store.connect(a.id, b.id)
        store.connect(b.id, a.id)
        errors = detect_cycles(store.snapshot())
        self.assertEqual(len(errors), 1)
        self.assertEqual(set(errors[0].details), {a.id, b.id})
        self.assertIn(errors[0], validate_graph(store.snapshot()))

    def test_chain_has_no_cycle(self):
        """Test that a linear chain has no cycle."""
        graph = make_graph(["a", "b", "c"], [("a", "b"), ("b", "c")])
        self.assertEqual(detect_cycles(graph), [])
        self.assertTrue(is_valid(graph))

    def test_diamond_has_no_cycle(self):
        """Test that converging branches are not mistaken for a cycle."""
        graph = make_graph(["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        self.assertEqual(find_cycle_members(graph), [])

    def test_reports_every_cycle_member_only(self):
        """Test that every node on a cycle is reported and nodes off it are not."""
        # x -> a -> b -> c -> a, plus a -> d -> b closes a second loop
        graph = make_graph(
            ["x", "a", "b", "c", "d", "z"],
            [("x", "a"), ("a", "b"), ("b", "c"), ("c", "a"), ("a", "d"), ("d", "b"), ("c", "z")],
        )
        self.assertEqual(find_cycle_members(graph), ["a", "b", "c", "d"])

    def test_separate_cycles(self):
        """Test that members of disjoint cycles are all reported."""
        graph = make_graph(["a", "b", "c", "d"], [("a", "b"), ("b", "a"), ("c", "d"), ("d", "c")])
        self.assertEqual(find_cycle_members(graph), ["a", "b", "c", "d"])

    def test_long_chain_does_not_recurse(self):
        """Test that a very long chain is checked without hitting the recursion limit."""
        ids = [f"n{i}" for i in range(3000)]
        graph = make_graph(ids, list(zip(ids, ids[1:])))
        self.assertEqual(find_cycle_members(graph), [])


class TestSelfLoops(unittest.TestCase):

    def test_self_loop_reported_once(self):
        """Test that a self-loop is reported once as a degenerate edge, not as a cycle."""
        graph = make_graph(["a"], [("a", "a")])
        errors = validate_graph(graph)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors, check_self_loops(graph))
        self.assertEqual(errors[0].node_id, "a")
        self.assertEqual(detect_cycles(graph), [])


class TestValidateGraph(unittest.TestCase):

    def test_checks_are_not_short_circuited(self):
        """Test that every check runs and errors come back in check order."""
        graph = Graph(
            nodes=(Node(id="a", type="output"), Node(id="b", type="filter"), Node(id="c", type="filter")),
            edges=(Edge(id="e1", source="b", target="c"), Edge(id="e2", source="c", target="b"),
                   Edge(id="e3", source="b", target="ghost")),
        )
        errors = validate_graph(graph)
        messages = [e.message for e in errors]
        self.assertEqual(len(errors), 4)
        self.assertIn("orphan", messages[0])
        self.assertIn("ghost", messages[1])
        self.assertEqual(errors[2].node_id, "a")
        self.assertIn("Circular", messages[3])

    def test_valid_pipeline(self):
        """Test that a fully configured linear pipeline has no errors."""
        store = GraphStore()
        src = store.add_node("data-source", config={"connectionString": "pg://db", "tableName": "orders"})
        flt = store.add_node("filter", config={"conditions": [{"field": "amount", "value": "10"}]})
        out = store.add_node("output", config={"destination": "s3://bucket/out"})
        store.connect(src.id, flt.id)
        store.connect(flt.id, out.id)
        self.assertEqual(validate_graph(store.snapshot()), [])

    def test_empty_graph_is_valid(self):
        """Test that an empty graph is valid."""
        self.assertTrue(is_valid(Graph()))


if __name__ == "__main__":
    unittest.main()
