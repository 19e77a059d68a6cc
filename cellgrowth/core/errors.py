"""
Errors raised by mesh surgery.
"""

from typing import Optional


class TopologyError(Exception):
    """
    Raised when a cell's neighborhood is not a closable fan of triangles.
    
    Carries the id of the cell being operated on and the name of the
    operation that failed so the frame loop can decide whether to skip the
    cell or abort.
    """
    
    def __init__(self, message: str, cell_id: Optional[int] = None, operation: str = "unknown"):
        super().__init__(message)
        self.cell_id = cell_id
        self.operation = operation
    
    def __str__(self) -> str:
        base = super().__str__()
        if self.cell_id is None:
            return f"{self.operation}: {base}"
        return f"{self.operation} (cell {self.cell_id}): {base}"
