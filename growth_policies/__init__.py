"""
Growth Policies - Centralized policy definitions for cellular growth.

This package provides the policy dataclasses used by the cellgrowth library.
All policies are JSON-serializable.

Usage:
    from growth_policies import SimulationPolicy, FoodPolicy, FoodMode
    from growth_policies import ReactionDiffusionPolicy, OperationReport
"""

from .base import (
    OperationReport,
    validate_policy,
    coerce_float,
    coerce_vec3,
)

from .simulation import (
    SimulationPolicy,
    TOPOLOGY_ERROR_ACTIONS,
)

from .food import (
    FoodMode,
    FoodPolicy,
    ReactionDiffusionPolicy,
)

__all__ = [
    # Base
    "OperationReport",
    "validate_policy",
    "coerce_float",
    "coerce_vec3",
    # Simulation
    "SimulationPolicy",
    "TOPOLOGY_ERROR_ACTIONS",
    # Food
    "FoodMode",
    "FoodPolicy",
    "ReactionDiffusionPolicy",
]
