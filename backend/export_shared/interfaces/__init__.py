"""
Abstract interfaces for external collaborators
"""

from .tabular_store import TabularStore

__all__ = ["TabularStore"]
