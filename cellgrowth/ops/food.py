"""
Food distribution strategies.

Every strategy computes a ``{cell_id: amount}`` mapping from the committed
state of the mesh; ``distribute_food`` queues those amounts with
``Cell.add_food`` so they only become visible after the next commit.
"""

from collections import deque
from typing import Dict, Iterable, List, Mapping, Optional
import logging
import numpy as np

from growth_policies import FoodMode, FoodPolicy

from ..core.cell import Cell
from ..core.face import FaceSet
from .reaction_diffusion import ReactionDiffusion

logger = logging.getLogger(__name__)


def farthest_cell(cells: Mapping[int, Cell]) -> Optional[int]:
    """Id of the cell farthest from the population centroid."""
    if not cells:
        return None
    ids = sorted(cells)
    positions = np.array([cells[cid].position for cid in ids])
    dist = np.linalg.norm(positions - positions.mean(axis=0), axis=1)
    return ids[int(np.argmax(dist))]


def _unit_axis(axis) -> np.ndarray:
    axis = np.asarray(axis, dtype=float)
    return axis / np.linalg.norm(axis)


def constant_food(
    cells: Mapping[int, Cell],
    amount: float,
    jitter: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> Dict[int, float]:
    """Same amount for every cell, optionally reduced by a random share."""
    if jitter <= 0.0:
        return {cid: amount for cid in cells}
    rng = rng if rng is not None else np.random.default_rng()
    ids = sorted(cells)
    scale = 1.0 - jitter * rng.random(len(ids))
    return {cid: float(amount * s) for cid, s in zip(ids, scale)}


def breadth_food(
    cells: Mapping[int, Cell],
    seeds: Iterable[int],
    amount: float,
    decay: float,
    min_amount: float = 1e-3,
    max_depth: int = 64,
) -> Dict[int, float]:
    """
    Spread ``amount`` outward from ``seeds`` breadth-first.

    A cell at graph distance k from the nearest seed receives
    ``amount * decay**k``; the walk stops once that falls below
    ``min_amount`` or k exceeds ``max_depth``.
    """
    result: Dict[int, float] = {}
    queue = deque()
    for seed in seeds:
        if seed in cells and seed not in result:
            result[seed] = amount
            queue.append((seed, 0))

    while queue:
        cid, depth = queue.popleft()
        if depth >= max_depth:
            continue
        share = amount * decay ** (depth + 1)
        if share < min_amount:
            continue
        for other in cells[cid].connections:
            if other not in result:
                result[other] = share
                queue.append((other, depth + 1))
    return result


def _density_weights(cells: Mapping[int, Cell], ids: List[int], prefer_sparse: bool) -> np.ndarray:
    counts = np.array([cells[cid].collision_count for cid in ids], dtype=float)
    peak = counts.max() if len(counts) else 0.0
    weights = counts / peak if peak > 0 else np.zeros_like(counts)
    return 1.0 - weights if prefer_sparse else weights


def density_food(
    cells: Mapping[int, Cell],
    amount: float,
    prefer_sparse: bool = False,
) -> Dict[int, float]:
    """
    Food proportional to how crowded a cell is (its last collision count),
    or to how empty it is with ``prefer_sparse``.
    """
    ids = sorted(cells)
    weights = _density_weights(cells, ids, prefer_sparse)
    return {cid: float(amount * w) for cid, w in zip(ids, weights)}


def x_axis_density_food(
    cells: Mapping[int, Cell],
    amount: float,
    axis=(1.0, 0.0, 0.0),
    prefer_sparse: bool = False,
) -> Dict[int, float]:
    """
    Density weighting scaled by where the cell sits along ``axis``: the
    lowest projection gets nothing, the highest gets the full density share.
    """
    ids = sorted(cells)
    if not ids:
        return {}
    weights = _density_weights(cells, ids, prefer_sparse)
    proj = np.array([cells[cid].position for cid in ids]) @ _unit_axis(axis)
    span = proj.max() - proj.min()
    along = (proj - proj.min()) / span if span > 0 else np.ones_like(proj)
    return {cid: float(amount * w * a) for cid, w, a in zip(ids, weights, along)}


def planar_food(
    cells: Mapping[int, Cell],
    amount: float,
    axis=(0.0, 0.0, 1.0),
    band: float = 2.0,
) -> Dict[int, float]:
    """
    Food for cells near the plane through the origin orthogonal to ``axis``,
    falling off linearly to zero at distance ``band``.
    """
    unit = _unit_axis(axis)
    result = {}
    for cid in sorted(cells):
        height = abs(float(cells[cid].position @ unit))
        result[cid] = amount * max(0.0, 1.0 - height / band)
    return result


def face_food(
    faces: FaceSet,
    amount: float,
    axis=(0.0, 0.0, 1.0),
    alignment: float = 0.5,
) -> Dict[int, float]:
    """
    Credit the three corners of every face whose normal points along
    ``axis`` (dot product at least ``alignment``) with a third of
    ``amount * area`` each. Face winding is arbitrary, so both
    orientations of a normal count.
    """
    unit = _unit_axis(axis)
    result: Dict[int, float] = {}
    for face in faces:
        if abs(float(face.normal @ unit)) < alignment:
            continue
        share = amount * face.area / 3.0
        for cid in face.ids:
            result[cid] = result.get(cid, 0.0) + share
    return result


def reaction_diffusion_food(
    cells: Mapping[int, Cell],
    field: ReactionDiffusion,
    amount: float,
) -> Dict[int, float]:
    """Advance the reaction-diffusion field one step and feed ``amount * v``."""
    field.step(cells)
    return {cid: amount * cells[cid].v for cid in sorted(cells)}


def distribute_food(
    cells: Mapping[int, Cell],
    policy: FoodPolicy,
    seed_ids: Optional[Iterable[int]] = None,
    faces: Optional[FaceSet] = None,
    field: Optional[ReactionDiffusion] = None,
    rng: Optional[np.random.Generator] = None,
) -> Dict[int, float]:
    """
    Run the strategy selected by ``policy.mode`` and queue its output.

    Parameters
    ----------
    cells : Mapping[int, Cell]
        Cell arena
    policy : FoodPolicy
        Strategy selector and parameters
    seed_ids : iterable of int, optional
        Breadth-mode seeds; overrides ``policy.seed_ids``. With neither,
        the cell farthest from the centroid is used.
    faces : FaceSet, optional
        Current faces (face mode)
    field : ReactionDiffusion, optional
        Reaction-diffusion field (reaction_diffusion mode)
    rng : np.random.Generator, optional
        Random source (constant mode jitter)

    Returns
    -------
    Dict[int, float]
        Amount queued per cell id
    """
    mode = policy.mode
    if mode == FoodMode.CONSTANT:
        amounts = constant_food(cells, policy.amount, policy.jitter, rng)
    elif mode == FoodMode.BREADTH:
        seeds = list(seed_ids) if seed_ids is not None else policy.seed_ids
        if not seeds:
            farthest = farthest_cell(cells)
            seeds = [] if farthest is None else [farthest]
        amounts = breadth_food(
            cells, seeds, policy.amount, policy.decay,
            policy.min_amount, policy.max_depth,
        )
    elif mode == FoodMode.DENSITY:
        amounts = density_food(cells, policy.amount, policy.prefer_sparse)
    elif mode == FoodMode.X_AXIS_DENSITY:
        amounts = x_axis_density_food(cells, policy.amount, policy.axis, policy.prefer_sparse)
    elif mode == FoodMode.PLANAR:
        amounts = planar_food(cells, policy.amount, policy.axis, policy.band)
    elif mode == FoodMode.FACE:
        if faces is None:
            raise ValueError("face food mode requires the current face set")
        amounts = face_food(faces, policy.amount, policy.axis, policy.face_alignment)
    elif mode == FoodMode.REACTION_DIFFUSION:
        if field is None:
            raise ValueError("reaction_diffusion food mode requires a ReactionDiffusion field")
        amounts = reaction_diffusion_food(cells, field, policy.amount)
    else:
        raise ValueError(f"Unknown food mode: {mode!r}")

    for cid, amount in amounts.items():
        if amount:
            cells[cid].add_food(amount)

    logger.debug(
        f"Food ({mode.value}): {sum(amounts.values()):.4f} queued over {len(amounts)} cells"
    )
    return amounts


__all__ = [
    "farthest_cell",
    "constant_food",
    "breadth_food",
    "density_food",
    "x_axis_density_food",
    "planar_food",
    "face_food",
    "reaction_diffusion_food",
    "distribute_food",
]
