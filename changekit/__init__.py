"""Changekit: changeset-based release notes and version bump recommendation."""

__version__ = "0.1.0"
