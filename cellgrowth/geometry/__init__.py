"""Seed geometry generators."""

from .icosphere import subdivided_icosahedron, remove_duplicates

__all__ = [
    "subdivided_icosahedron",
    "remove_duplicates",
]
