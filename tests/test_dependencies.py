"""Unit tests for the dependency mapper."""

from fakeaudit.models import DependencyEdge
from fakeaudit.scanners.dependencies import (
    dependency_risk,
    dependency_total,
    map_dependencies,
)

SCRIPT = """\
helper() {
  echo hi
}
main() {
  helper
  helper one
  x=$(helper)
  helper_two
}
# helper in a comment
main
"""


class TestMapDependencies:
    """Tests for name-based call counting."""

    def test_call_counts(self) -> None:
        """Definition and comment lines are not counted as calls."""
        edges = map_dependencies("deploy.sh", SCRIPT.splitlines())
        counts = {edge.function: edge.call_count for edge in edges}

        assert counts == {"helper": 3, "main": 1}

    def test_risk_levels(self) -> None:
        """Call counts map to risk labels."""
        edges = {e.function: e for e in map_dependencies("deploy.sh", SCRIPT.splitlines())}

        assert edges["helper"].risk == "MEDIUM"
        assert edges["main"].risk == "LOW"

    def test_uncalled_function_has_no_edge(self) -> None:
        """Functions that are never called produce no edge."""
        edges = map_dependencies("x.sh", ["lonely() {", "  cp a b", "}"])
        assert edges == []

    def test_total_for_file(self) -> None:
        """Totals only include edges of the requested file."""
        edges = [
            DependencyEdge("a.sh", "f", 2),
            DependencyEdge("a.sh", "g", 4),
            DependencyEdge("b.sh", "f", 9),
        ]
        assert dependency_total(edges, "a.sh") == 6
        assert dependency_total(edges, "c.sh") == 0

    def test_edge_to_dict(self) -> None:
        """Serialized edges include the risk label."""
        data = DependencyEdge("a.sh", "f", 6).to_dict()
        assert data == {"file": "a.sh", "function": "f", "call_count": 6, "risk_level": "HIGH"}


class TestDependencyRisk:
    """Tests for the risk thresholds."""

    def test_thresholds(self) -> None:
        assert dependency_risk(0) == "LOW"
        assert dependency_risk(2) == "LOW"
        assert dependency_risk(3) == "MEDIUM"
        assert dependency_risk(5) == "MEDIUM"
        assert dependency_risk(6) == "HIGH"
