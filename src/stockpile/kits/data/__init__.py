"""Bundled kit files."""
