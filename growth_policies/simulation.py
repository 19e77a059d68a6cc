"""
Simulation-wide tunables for cellular growth.

Every value here is global to a Simulation. Per-cell copies are taken
through ``SimulationPolicy.cell_params()`` when cells are seeded, so a
lineage can later diverge from the global values without affecting others.

All policies are JSON-serializable and round-trip through to_dict/from_dict.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional
import math

TOPOLOGY_ERROR_ACTIONS = ("skip", "raise")


@dataclass
class SimulationPolicy:
    """
    Policy controlling the frame loop and the per-cell force model.
    
    JSON Schema:
    {
        "link_rest_length": float,
        "spring_factor": float,
        "planar_factor": float,
        "bulge_factor": float,
        "repulsion_strength": float,
        "roi_squared": float,
        "split_threshold": float,
        "collisions_enabled": bool,
        "recompute_normals": bool,
        "recenter": bool,
        "on_topology_error": "skip" | "raise",
        "icosphere_levels": int,
        "icosphere_radius": float,
        "seed": int | null
    }
    
    ``roi_squared`` is the squared region-of-influence radius, kept squared
    so hosts can compare it against squared distances directly.
    
    ``on_topology_error`` decides what the frame loop does when a split
    cannot recover the cell's neighbor ring: "skip" logs a warning and keeps
    the cell's food so the split is retried next frame, "raise" propagates
    the TopologyError to the caller.
    """
    link_rest_length: float = 1.0
    spring_factor: float = 0.1
    planar_factor: float = 0.1
    bulge_factor: float = 0.1
    repulsion_strength: float = 0.5
    roi_squared: float = 4.0
    split_threshold: float = 10.0
    collisions_enabled: bool = True
    recompute_normals: bool = False
    recenter: bool = False
    on_topology_error: Literal["skip", "raise"] = "skip"
    icosphere_levels: int = 2
    icosphere_radius: float = 4.0
    seed: Optional[int] = None
    
    @property
    def roi(self) -> float:
        return math.sqrt(self.roi_squared)
    
    def cell_params(self):
        """Build the immutable per-cell parameter snapshot."""
        from cellgrowth.core.cell import CellParams
        
        return CellParams(
            link_rest_length=self.link_rest_length,
            spring_factor=self.spring_factor,
            planar_factor=self.planar_factor,
            bulge_factor=self.bulge_factor,
            repulsion_strength=self.repulsion_strength,
            roi=self.roi,
        )
    
    def validate(self) -> List[str]:
        errors = []
        if self.link_rest_length <= 0:
            errors.append(f"link_rest_length must be positive, got {self.link_rest_length}")
        if self.roi_squared <= 0:
            errors.append(f"roi_squared must be positive, got {self.roi_squared}")
        if self.on_topology_error not in TOPOLOGY_ERROR_ACTIONS:
            errors.append(
                f"on_topology_error must be one of {TOPOLOGY_ERROR_ACTIONS}, "
                f"got {self.on_topology_error!r}"
            )
        if self.icosphere_levels < 0:
            errors.append(f"icosphere_levels must be >= 0, got {self.icosphere_levels}")
        if self.icosphere_radius <= 0:
            errors.append(f"icosphere_radius must be positive, got {self.icosphere_radius}")
        return errors
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "link_rest_length": self.link_rest_length,
            "spring_factor": self.spring_factor,
            "planar_factor": self.planar_factor,
            "bulge_factor": self.bulge_factor,
            "repulsion_strength": self.repulsion_strength,
            "roi_squared": self.roi_squared,
            "split_threshold": self.split_threshold,
            "collisions_enabled": self.collisions_enabled,
            "recompute_normals": self.recompute_normals,
            "recenter": self.recenter,
            "on_topology_error": self.on_topology_error,
            "icosphere_levels": self.icosphere_levels,
            "icosphere_radius": self.icosphere_radius,
            "seed": self.seed,
        }
    
    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SimulationPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


__all__ = [
    "SimulationPolicy",
    "TOPOLOGY_ERROR_ACTIONS",
]
