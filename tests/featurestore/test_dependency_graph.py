"""
Tests for the lazy dependency graph.

Tests:
- Walk order and node states
- Lazy metadata fetching with referrer tracking
- Completion callbacks
- Cycle reporting
"""

import pytest

from src.featurestore.core.dependency import DependencyGraph, NodeState
from src.featurestore.core.errors import CircularDependencyError
from src.featurestore.core.models import FeatureMeta


def fetcher(graph, calls=None):
    """Metadata fetcher over a {name: [deps]} mapping."""
    def fetch(name, parent):
        if calls is not None:
            calls.append((name, parent))
        return FeatureMeta(name=name, dependencies=tuple(graph[name]))
    return fetch


# ============================================================================
# Tests: Walk
# ============================================================================

class TestWalk:
    """Tests for depth-first walking."""

    def test_single_node(self):
        """Test walking a node without dependencies."""
        graph = DependencyGraph()

        order = graph.walk("a", fetcher({"a": []}))

        assert order == ["a"]
        assert graph.state("a") is NodeState.DONE

    def test_linear_chain(self):
        """Test a linear chain is emitted bottom-up."""
        graph = DependencyGraph()

        order = graph.walk("c", fetcher({"a": [], "b": ["a"], "c": ["b"]}))

        assert order == ["a", "b", "c"]

    def test_declared_order_between_siblings(self):
        """Test siblings are visited in declared order."""
        graph = DependencyGraph()

        order = graph.walk("top", fetcher({"x": [], "m": [], "a": [], "top": ["x", "m", "a"]}))

        assert order == ["x", "m", "a", "top"]

    def test_edges_are_deduplicated(self):
        """Test duplicate declarations collapse to first-seen order."""
        graph = DependencyGraph()

        graph.walk("c", fetcher({"a": [], "b": [], "c": ["b", "a", "b"]}))

        assert graph.get_dependencies("c") == ["b", "a"]
        assert graph.get_dependencies("unknown") == []

    def test_unvisited_nodes_keep_default_state(self):
        """Test nodes outside the closure are never touched."""
        graph = DependencyGraph()

        graph.walk("b", fetcher({"a": [], "b": ["a"], "other": []}))

        assert graph.state("other") is NodeState.UNVISITED

    def test_fetch_receives_referrer(self):
        """Test the fetcher is told which node declared the dependency."""
        calls = []
        graph = DependencyGraph()

        graph.walk("c", fetcher({"a": [], "b": ["a"], "c": ["b", "a"]}, calls))

        assert calls == [("c", None), ("b", "c"), ("a", "b")]

    def test_completion_callback_order(self):
        """Test on_complete is invoked in output order with referrers."""
        completed = []
        graph = DependencyGraph()

        order = graph.walk(
            "c",
            fetcher({"a": [], "b": ["a"], "c": ["a", "b"]}),
            lambda name, parent: completed.append((name, parent)),
        )

        assert order == ["a", "b", "c"]
        assert completed == [("a", "c"), ("b", "c"), ("c", None)]

    def test_fetch_errors_propagate(self):
        """Test fetcher exceptions abort the walk."""
        graph = DependencyGraph()

        with pytest.raises(KeyError):
            graph.walk("a", fetcher({"a": ["missing"]}))

        assert graph.state("a") is NodeState.IN_PROGRESS
        assert graph.order == []


# ============================================================================
# Tests: Cycles
# ============================================================================

class TestCycles:
    """Tests for cycle detection during a walk."""

    def test_self_cycle(self):
        """Test a node depending on itself."""
        with pytest.raises(CircularDependencyError) as exc_info:
            DependencyGraph().walk("a", fetcher({"a": ["a"]}))

        assert exc_info.value.cycle == ["a"]

    def test_cycle_after_completed_branch(self):
        """Test a cycle found after an unrelated branch finished."""
        with pytest.raises(CircularDependencyError) as exc_info:
            DependencyGraph().walk("top", fetcher({
                "top": ["ok", "p"],
                "ok": [],
                "p": ["q"],
                "q": ["p"],
            }))

        assert exc_info.value.cycle == ["p", "q"]
        assert exc_info.value.edge == ("q", "p")

    def test_error_message_closes_loop(self):
        """Test the message repeats the first node at the end."""
        error = CircularDependencyError(["a", "b"])

        assert str(error) == "Circular dependency detected: a -> b -> a"
