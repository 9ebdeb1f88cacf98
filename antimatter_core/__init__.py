"""
Antimatter Core

Simulation engine for an incremental dimension game: arbitrary-magnitude
numbers, dimension cost and production curves, prestige resets and
offline time banking.
"""

__version__ = "1.0.0"
