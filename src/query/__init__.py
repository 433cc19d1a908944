"""
Query module - Handles reachability, outgoing edges and statistics
"""

from .traversal import reachable_from, outgoing_edges
from .stats import compute_stats

__all__ = ["reachable_from", "outgoing_edges", "compute_stats"]
