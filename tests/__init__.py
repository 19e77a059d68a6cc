"""
Tests for Cellular Growth

This package contains tests for:
- The per-cell force model and faces
- Ring ordering, splitting and food distribution
- Seed geometry and the proximity index
- The frame loop, topology validation and adapters
"""
