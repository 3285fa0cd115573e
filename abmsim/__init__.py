"""Coordinates, seeded randomness, measurements and output handling for agent-based simulations."""

__version__ = "0.1.0"