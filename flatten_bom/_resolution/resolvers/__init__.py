"""Artifact resolver implementations."""

from .static_graph import StaticGraphResolver

__all__ = ["StaticGraphResolver"]
