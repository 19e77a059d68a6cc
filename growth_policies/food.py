"""
Food distribution policies.

A single FoodPolicy selects one of the distribution strategies in
``cellgrowth.ops.food`` and carries the parameters for all of them; fields
a strategy does not read are ignored. The reaction-diffusion strategy takes
its Gray-Scott constants from ReactionDiffusionPolicy.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .base import coerce_vec3


class FoodMode(str, Enum):
    """Available food distribution strategies."""
    CONSTANT = "constant"
    BREADTH = "breadth"
    DENSITY = "density"
    X_AXIS_DENSITY = "x_axis_density"
    PLANAR = "planar"
    FACE = "face"
    REACTION_DIFFUSION = "reaction_diffusion"


@dataclass
class FoodPolicy:
    """
    Policy for per-frame food distribution.
    
    JSON Schema:
    {
        "mode": "constant" | "breadth" | "density" | "x_axis_density"
                | "planar" | "face" | "reaction_diffusion",
        "amount": float,
        "jitter": float (0..1, constant mode only),
        "decay": float (0..1, breadth mode),
        "min_amount": float (breadth mode cutoff),
        "max_depth": int (breadth mode),
        "seed_ids": [int] | null (breadth mode; default farthest cell),
        "prefer_sparse": bool (density modes),
        "axis": [float, float, float],
        "band": float (planar mode),
        "face_alignment": float (-1..1, face mode)
    }
    """
    mode: FoodMode = FoodMode.CONSTANT
    amount: float = 1.0
    jitter: float = 0.0
    decay: float = 0.8
    min_amount: float = 1e-3
    max_depth: int = 64
    seed_ids: Optional[List[int]] = None
    prefer_sparse: bool = False
    axis: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    band: float = 2.0
    face_alignment: float = 0.5
    
    def __post_init__(self):
        self.mode = FoodMode(self.mode)
        self.axis = coerce_vec3(self.axis, default=(1.0, 0.0, 0.0))
    
    def validate(self) -> List[str]:
        errors = []
        if self.amount < 0:
            errors.append(f"amount must be non-negative, got {self.amount}")
        if not 0.0 <= self.jitter <= 1.0:
            errors.append(f"jitter must be in [0, 1], got {self.jitter}")
        if not 0.0 < self.decay <= 1.0:
            errors.append(f"decay must be in (0, 1], got {self.decay}")
        if self.band <= 0:
            errors.append(f"band must be positive, got {self.band}")
        if sum(a * a for a in self.axis) == 0.0:
            errors.append("axis must be non-zero")
        return errors
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "amount": self.amount,
            "jitter": self.jitter,
            "decay": self.decay,
            "min_amount": self.min_amount,
            "max_depth": self.max_depth,
            "seed_ids": self.seed_ids,
            "prefer_sparse": self.prefer_sparse,
            "axis": list(self.axis),
            "band": self.band,
            "face_alignment": self.face_alignment,
        }
    
    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FoodPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class ReactionDiffusionPolicy:
    """
    Gray-Scott constants for the reaction-diffusion food strategy.
    
    JSON Schema:
    {
        "feed": float,
        "kill": float,
        "ra": float (diffusion rate of u),
        "rb": float (diffusion rate of v),
        "dt": float,
        "seed_fraction": float (0..1)
    }
    
    ``seed_fraction`` is the share of cells that start with u = 0.5 and
    v = 0.25 when the field is seeded; 0 leaves the uniform rest state
    u = 1, v = 0 in place.
    """
    feed: float = 0.055
    kill: float = 0.062
    ra: float = 1.0
    rb: float = 0.5
    dt: float = 1.0
    seed_fraction: float = 0.05
    
    def validate(self) -> List[str]:
        errors = []
        for name in ("feed", "kill", "ra", "rb"):
            if getattr(self, name) < 0:
                errors.append(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.dt <= 0:
            errors.append(f"dt must be positive, got {self.dt}")
        if not 0.0 <= self.seed_fraction <= 1.0:
            errors.append(f"seed_fraction must be in [0, 1], got {self.seed_fraction}")
        return errors
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "feed": self.feed,
            "kill": self.kill,
            "ra": self.ra,
            "rb": self.rb,
            "dt": self.dt,
            "seed_fraction": self.seed_fraction,
        }
    
    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ReactionDiffusionPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


__all__ = [
    "FoodMode",
    "FoodPolicy",
    "ReactionDiffusionPolicy",
]
