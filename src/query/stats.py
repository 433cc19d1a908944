"""
Flowchart Statistics

Summarizes a stored flowchart with NetworkX.
"""

import networkx as nx

from ..graph.schema import Flowchart, FlowchartStats


def to_networkx(flowchart: Flowchart) -> nx.DiGraph:
    """Build a DiGraph from a flowchart (repeated edges collapse into one)"""
    G = nx.DiGraph()
    for node in flowchart.nodes:
        G.add_node(node.id, label=node.label)
    for edge in flowchart.edges:
        G.add_edge(edge.source, edge.target)
    return G


def compute_stats(flowchart: Flowchart) -> FlowchartStats:
    """
    Calculate flowchart statistics.

    entry_nodes have no incoming edges, exit_nodes no outgoing ones.
    longest_path is only computed for acyclic graphs.
    """
    G = to_networkx(flowchart)

    entry_nodes = [n for n in G.nodes if G.in_degree(n) == 0]
    exit_nodes = [n for n in G.nodes if G.out_degree(n) == 0]

    longest_path = None
    if nx.is_directed_acyclic_graph(G):
        longest_path = list(nx.dag_longest_path(G))

    return FlowchartStats(
        flowchart_id=flowchart.id,
        total_nodes=G.number_of_nodes(),
        total_edges=len(flowchart.edges),
        entry_nodes=entry_nodes,
        exit_nodes=exit_nodes,
        components=nx.number_weakly_connected_components(G) if G.number_of_nodes() else 0,
        longest_path=longest_path
    )
