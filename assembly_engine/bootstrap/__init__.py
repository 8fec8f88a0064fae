"""Composition root.

Infrastructure-aware wiring lives here so the application layer only
ever depends on ports.
"""
