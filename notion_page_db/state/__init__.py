"""Local state tracking for notion-page-db."""

from .manager import StateManager

__all__ = ["StateManager"]
