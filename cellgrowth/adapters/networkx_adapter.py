"""
Conversion of the cell connection graph to networkx.
"""

from typing import Mapping
import networkx as nx

from ..core.cell import Cell


def to_networkx_graph(cells: Mapping[int, Cell], with_positions: bool = True) -> nx.Graph:
    """
    Build an undirected networkx graph from the cell arena.

    Nodes are cell ids; with ``with_positions`` each node carries a
    ``position`` attribute (tuple). One-sided links still produce an edge,
    so run the topology validation pass to detect asymmetry.
    """
    G = nx.Graph()
    for cid in sorted(cells):
        cell = cells[cid]
        if with_positions:
            G.add_node(cid, position=tuple(float(x) for x in cell.position))
        else:
            G.add_node(cid)
    for cid in sorted(cells):
        for other in cells[cid].connections:
            if other in cells:
                G.add_edge(cid, other)
    return G


__all__ = ["to_networkx_graph"]
