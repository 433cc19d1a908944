"""
Tests for flowchart statistics
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.graph.schema import Flowchart
from src.query.stats import compute_stats, to_networkx


def make_flowchart(ids, pairs, flowchart_id=1):
    return Flowchart(
        id=flowchart_id,
        name="Stats",
        nodes=[{"id": i, "label": f"Node {i}"} for i in ids],
        edges=[{"source": s, "target": t} for s, t in pairs]
    )


class TestComputeStats:
    """Tests for compute_stats"""

    def test_chain(self):
        stats = compute_stats(make_flowchart(["1", "2", "3"], [("1", "2"), ("2", "3")]))
        assert stats.flowchart_id == 1
        assert stats.total_nodes == 3
        assert stats.total_edges == 2
        assert stats.entry_nodes == ["1"]
        assert stats.exit_nodes == ["3"]
        assert stats.components == 1
        assert stats.longest_path == ["1", "2", "3"]

    def test_repeated_edges_counted(self):
        """total_edges counts every declared edge"""
        stats = compute_stats(make_flowchart(["1", "2"], [("1", "2"), ("1", "2")]))
        assert stats.total_edges == 2
        assert to_networkx(make_flowchart(["1", "2"], [("1", "2"), ("1", "2")])).number_of_edges() == 1

    def test_disconnected(self):
        stats = compute_stats(make_flowchart(["1", "2", "3"], [("1", "2")]))
        assert stats.components == 2
        assert stats.entry_nodes == ["1", "3"]
        assert stats.exit_nodes == ["2", "3"]

    def test_empty(self):
        stats = compute_stats(make_flowchart([], []))
        assert stats.total_nodes == 0
        assert stats.components == 0
        assert stats.longest_path == []

    def test_cyclic_has_no_longest_path(self):
        stats = compute_stats(make_flowchart(["1", "2"], [("1", "2"), ("2", "1")]))
        assert stats.longest_path is None
        assert stats.entry_nodes == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
