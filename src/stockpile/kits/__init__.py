"""Recommendation kits: validation, built-in data and the kit registry."""
