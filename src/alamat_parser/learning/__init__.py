"""Adaptive learning state."""

from alamat_parser.learning.store import LearningStore

__all__ = ["LearningStore"]
