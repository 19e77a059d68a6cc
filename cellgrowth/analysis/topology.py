"""
Topology validation for the cell connection graph.

Splitting assumes every cell sits in a closed fan of triangles. This pass
checks that precondition together with the hard graph invariants, so tests
and hosts can verify a mesh before relying on it.

Checks:
- links point at existing cells
- links are symmetric
- no self loops or duplicate links
- every cell's ring can be closed and covers all of its neighbors
- the graph is a single connected component
"""

from typing import List, Mapping, Union
import logging
import networkx as nx

from growth_policies import OperationReport

from ..adapters.networkx_adapter import to_networkx_graph
from ..core.cell import Cell
from ..core.simulation import Simulation
from ..ops.ring import is_closable

logger = logging.getLogger(__name__)


def validate_topology(
    source: Union[Simulation, Mapping[int, Cell]],
    check_rings: bool = True,
    check_connectivity: bool = True,
) -> OperationReport:
    """
    Validate the connection graph.

    Parameters
    ----------
    source : Simulation or Mapping[int, Cell]
        Simulation or bare cell arena to check
    check_rings : bool
        Whether to verify that every cell's neighbors form a closable ring.
        Meshes with a boundary (open sheets) fail this check at the boundary.
    check_connectivity : bool
        Whether to require a single connected component

    Returns
    -------
    OperationReport
        ``success`` is False if any check failed; ``errors`` lists the
        violations and ``metrics`` carries counts.
    """
    cells = source.cells if isinstance(source, Simulation) else source

    report = OperationReport(
        operation="validate_topology",
        requested_policy={"check_rings": check_rings, "check_connectivity": check_connectivity},
        effective_policy={"check_rings": check_rings, "check_connectivity": check_connectivity},
    )

    dangling = 0
    asymmetric = 0
    self_loops = 0
    duplicates = 0
    for cid in sorted(cells):
        cell = cells[cid]
        if len(set(cell.connections)) != len(cell.connections):
            duplicates += 1
            report.add_error(f"Cell {cid} has duplicate links")
        for other in cell.connections:
            if other == cid:
                self_loops += 1
                report.add_error(f"Cell {cid} links to itself")
            elif other not in cells:
                dangling += 1
                report.add_error(f"Cell {cid} links to missing cell {other}")
            elif not cells[other].is_connected(cid):
                asymmetric += 1
                report.add_error(f"Link {cid} -> {other} has no reverse")

    open_rings: List[int] = []
    if check_rings:
        for cid in sorted(cells):
            if not is_closable(cells, cells[cid]):
                open_rings.append(cid)
        if open_rings:
            preview = ", ".join(str(c) for c in open_rings[:10])
            report.add_error(f"{len(open_rings)} cells have no closable ring: {preview}")

    components = 0
    if cells:
        components = nx.number_connected_components(to_networkx_graph(cells, with_positions=False))
        if check_connectivity and components > 1:
            report.add_error(f"Graph has {components} connected components")

    report.metrics.update({
        "cells": len(cells),
        "dangling_links": dangling,
        "asymmetric_links": asymmetric,
        "self_loops": self_loops,
        "cells_with_duplicates": duplicates,
        "open_rings": len(open_rings),
        "components": components,
    })

    if not report.success:
        logger.debug(f"Topology validation failed with {len(report.errors)} errors")
    return report


__all__ = ["validate_topology"]
