"""
Base utilities for growth policies.

This module provides shared helpers and the OperationReport dataclass
returned by policy-driven operations (frame updates, topology validation).
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Tuple
import json


def validate_policy(policy: Any, required_fields: Optional[List[str]] = None) -> List[str]:
    """
    Validate a policy object.
    
    Checks that required fields are present and non-None, then runs the
    policy's own ``validate()`` hook if it defines one.
    
    Parameters
    ----------
    policy : Any
        Policy dataclass instance to validate
    required_fields : List[str], optional
        List of field names that must be non-None
        
    Returns
    -------
    List[str]
        List of validation error messages (empty if valid)
    """
    errors = []
    
    if required_fields:
        for field_name in required_fields:
            if not hasattr(policy, field_name):
                errors.append(f"Missing required field: {field_name}")
            elif getattr(policy, field_name) is None:
                errors.append(f"Required field is None: {field_name}")
    
    hook = getattr(policy, "validate", None)
    if callable(hook):
        errors.extend(hook())
    
    return errors


def coerce_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a value to float, with fallback to default.
    
    Parameters
    ----------
    value : Any
        Value to coerce
    default : float
        Default value if coercion fails
        
    Returns
    -------
    float
        Coerced float value
    """
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def coerce_vec3(
    value: Any,
    default: Tuple[float, float, float] = (0.0, 0.0, 0.0)
) -> Tuple[float, float, float]:
    """
    Coerce a value to a 3D vector tuple.
    
    Accepts a tuple/list/array of 3 numbers or a dict with x, y, z keys.
    """
    if value is None:
        return default
    
    if isinstance(value, dict) and 'x' in value and 'y' in value and 'z' in value:
        try:
            return (float(value['x']), float(value['y']), float(value['z']))
        except (TypeError, ValueError):
            return default
    
    try:
        if len(value) >= 3:
            return (float(value[0]), float(value[1]), float(value[2]))
    except (TypeError, ValueError):
        return default
    
    return default


@dataclass
class OperationReport:
    """
    Standard report structure for growth operations.
    
    Every report carries the requested vs effective policy, warnings,
    errors, and operation-specific metrics.
    """
    operation: str = "unknown"
    success: bool = True
    requested_policy: Dict[str, Any] = field(default_factory=dict)
    effective_policy: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
    
    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
    
    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)
    
    def add_error(self, message: str) -> None:
        """Add an error message and mark as failed."""
        self.errors.append(message)
        self.success = False
    
    def merge(self, other: "OperationReport") -> None:
        """Merge another report into this one."""
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)
        if not other.success:
            self.success = False
        self.metrics.update(other.metrics)


__all__ = [
    "OperationReport",
    "validate_policy",
    "coerce_float",
    "coerce_vec3",
]
