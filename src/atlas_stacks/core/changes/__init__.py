"""Detecção de stacks alterados a partir de um diff git."""

from .detector import default_baseline, list_changed_stacks

__all__ = ["default_baseline", "list_changed_stacks"]
