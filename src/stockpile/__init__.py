"""
Stockpile emergency-supply preparedness engine.

The package validates and manages recommendation kits, scales their quantities to a
household, scores inventory against them, and derives dismissible alerts.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
